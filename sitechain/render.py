from __future__ import annotations

import datetime as dt
from pathlib import Path

from jinja2 import ChainableUndefined, Environment

DEFAULT_DATE_FMT = "%Y-%m-%d"

_env = Environment(
    autoescape=False,
    undefined=ChainableUndefined,
    keep_trailing_newline=True,
)


def format_date(value: object, fmt: str = DEFAULT_DATE_FMT) -> str:
    if isinstance(value, (dt.date, dt.datetime)):
        return value.strftime(fmt)
    return "" if value is None else str(value)


_env.filters["date"] = format_date


def evaluate(template: str, data: dict) -> str:
    context = {key: value for key, value in data.items() if isinstance(key, str)}
    return _env.from_string(template).render(context)


def merge_meta(parent: dict, child: dict) -> dict:
    """Overlay ``child`` on ``parent``; the child wins on every shared key."""
    merged = dict(parent)
    merged.update(child)
    return merged


def write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
