"""Logging setup and output-file helpers."""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_QUIET_LOGGERS = ("urllib3", "shapely")


def setup_logging(log_file: Path | None = None, verbose: bool = False) -> None:
    """Console logging, plus a fresh log file per resolution run."""
    level = logging.DEBUG if verbose else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def write_json(path: Path, payload: Any) -> Path:
    """Replace `path` with `payload` in one step. NaN and infinity are rejected."""
    path.parent.mkdir(parents=True, exist_ok=True)
    staging = path.with_name(f".{path.name}.partial")
    try:
        with staging.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, sort_keys=True, ensure_ascii=False, allow_nan=False)
            fh.write("\n")
        staging.replace(path)
    finally:
        staging.unlink(missing_ok=True)
    return path


def sha256_file(path: Path) -> str:
    """Fingerprint of a config file, recorded in the resolution report."""
    return hashlib.sha256(path.read_bytes()).hexdigest()
