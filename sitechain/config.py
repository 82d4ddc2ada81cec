from __future__ import annotations

import json
import logging
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

from .errors import ConfigError
from .utils import parse_int

logger = logging.getLogger(__name__)

CONFIG_NAMES = ("_config.json", "_config.toml", "_config.yml", "_config.yaml")
SITE_META_KEYS = ("title", "url", "author", "description")


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping: {path}")
    logger.debug("Loaded config from %s", path)
    return data


def find_config(source_dir: Path) -> Optional[Path]:
    for name in CONFIG_NAMES:
        candidate = source_dir / name
        if candidate.is_file():
            return candidate
    return None


@dataclass
class SiteConfig:
    dir: str = "."
    public: str = "_public"
    layouts: str = "_layouts"
    posts: str = "_posts"
    title: str = ""
    url: str = ""
    author: str = ""
    description: str = ""
    port: int = 8080
    mode: str = "generate"
    page_size: int = 10
    feed_limit: int = 20
    build_workers: int = 0
    max_chain_steps: int = 64
    max_walk_depth: int = 32
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: dict) -> "SiteConfig":
        known = {f.name: f for f in fields(cls) if f.name != "extra"}
        values: dict = {}
        extra: dict = {}
        for key, value in data.items():
            if key not in known:
                extra[key] = value
                continue
            if value is None:
                continue
            default = known[key].default
            if isinstance(default, int):
                values[key] = parse_int(value, default)
            else:
                values[key] = str(value)
        config = cls(**values, extra=extra)
        if config.page_size < 1:
            raise ConfigError(f"page_size must be at least 1, got {config.page_size}")
        return config

    def site_meta(self) -> dict:
        meta = dict(self.extra)
        for key in SITE_META_KEYS:
            meta[key] = getattr(self, key)
        return meta
