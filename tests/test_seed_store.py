import json
import logging

import pytest
import structlog

from dungen.generator import generate
from dungen.logging_utils import setup_logging
from dungen.seed_store import load_seed, save_seed


def test_save_and_load_seed(tmp_path):
    path = save_seed(tmp_path / "saves" / "dungeon.json", 4242)
    data = json.loads(path.read_text())
    assert data["seed"] == 4242
    assert "save_time" in data
    assert load_seed(path) == 4242


def test_missing_seed_file_returns_default(tmp_path):
    assert load_seed(tmp_path / "nothing.json") == 0
    assert load_seed(tmp_path / "nothing.json", default=17) == 17


def test_malformed_seed_file(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"name": "no seed"}))
    with pytest.raises(ValueError):
        load_seed(path)


def test_saved_seed_rebuilds_same_layout(tmp_path):
    first = generate()
    path = save_seed(tmp_path / "seed.json", first.seed)
    again = generate(load_seed(path))
    assert [r.rect for r in again.rooms] == [r.rect for r in first.rooms]


def test_setup_logging_accepts_level_names():
    try:
        setup_logging("debug", colors=False)
        setup_logging(logging.WARNING, colors=False)
        with pytest.raises(ValueError):
            setup_logging("chatty")
    finally:
        structlog.reset_defaults()
