# dungen/seed_store.py
"""Persist the seed of a generated dungeon so the layout can be rebuilt."""

import json
from datetime import datetime
from pathlib import Path
from typing import Union

import structlog

log = structlog.get_logger()

PathLike = Union[str, Path]


def save_seed(path: PathLike, seed: int) -> Path:
    path = Path(path)
    data = {"seed": int(seed), "save_time": datetime.now().isoformat(timespec="seconds")}
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    log.info("Seed saved", path=str(path), seed=seed)
    return path


def load_seed(path: PathLike, default: int = 0) -> int:
    """Return the stored seed, or ``default`` when the file does not exist."""
    path = Path(path)
    if not path.is_file():
        log.warning("No seed file found", path=str(path), default=default)
        return default
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    try:
        seed = int(data["seed"])
    except (KeyError, TypeError, ValueError) as e:
        log.error("Malformed seed file", path=str(path), error=str(e))
        raise ValueError(f"seed file {path} has no integer 'seed' entry") from e
    log.info("Seed loaded", path=str(path), seed=seed)
    return seed


__all__ = ["save_seed", "load_seed"]
