from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from sitechain.config import SiteConfig
from sitechain.site import Site


def front_matter(meta: dict | None, body: str) -> str:
    block = yaml.safe_dump(meta, sort_keys=False) if meta else ""
    return f"---\n{block}---\n\n{body}"


def write(root: Path, rel: str, text: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def source(tmp_path: Path) -> Path:
    src = tmp_path / "site"
    (src / "_public").mkdir(parents=True)
    write(src, "_layouts/default.html", front_matter(None, "<html>{{ content }}</html>"))
    return src


@pytest.fixture
def make_site(source: Path):
    def factory(**overrides) -> Site:
        config = SiteConfig.from_mapping({"dir": str(source), "build_workers": 1, **overrides})
        site = Site(config)
        site.init()
        return site

    return factory
