"""Query-string encoding for list options."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

import httpx
from pydantic import BaseModel


def _format(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            msg = f"datetime filter values must be timezone-aware, got {value.isoformat()}"
            raise ValueError(msg)
        if value.utcoffset() == timedelta(0):
            return value.strftime("%Y-%m-%dT%H:%M:%SZ")
        return value.isoformat(timespec="seconds")
    return str(value)


def encode_options(options: BaseModel) -> list[tuple[str, str]]:
    """Flatten an options model into query pairs, sorted by key.

    Empty values (None, "", 0, False, empty lists) are dropped. Lists are
    sent in bracket form: ``state[]=running&state[]=failed``. Naive datetimes
    raise ``ValueError``.
    """
    if not isinstance(options, BaseModel):
        msg = f"options must be a pydantic model, got {type(options).__name__}"
        raise TypeError(msg)

    pairs: list[tuple[str, str]] = []
    for name in sorted(type(options).model_fields):
        value = getattr(options, name)
        if not value:
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            pairs.extend((f"{name}[]", _format(item)) for item in value)
        else:
            pairs.append((name, _format(value)))
    return pairs


def add_options(path: str, options: BaseModel | None) -> str:
    """Return *path* with *options* appended as a query string.

    ``None`` options, or options with nothing set, leave the path untouched.
    """
    if options is None:
        return path
    pairs = encode_options(options)
    if not pairs:
        return path
    return f"{path}?{httpx.QueryParams(pairs)}"
