"""Structured log lines printed to stdout for the hosting platform."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

__all__ = ["log_event"]


def log_event(scope: str, message: str, extra: Optional[Mapping[str, Any]] = None) -> None:
    """Print a single JSON log entry tagged with ``scope``."""

    log_entry: Dict[str, Any] = {"scope": scope, "message": message}
    if extra:
        for key, value in extra.items():
            log_entry[key] = value
    print(json.dumps(log_entry, ensure_ascii=False, default=str))
