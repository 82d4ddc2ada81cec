from __future__ import annotations

import logging
import os
import posixpath
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Union

from .config import SiteConfig
from .errors import MissingOutputDir, ResourceNotFound
from .generators import BlogPostGenerator, FileGenerator, LayoutGenerator
from .renderers import RENDERERS, Payload
from .render import write_bytes
from .resources import FileResource, MetaResource

logger = logging.getLogger(__name__)

PRIVATE_PREFIX = ":"
INDEX_FILE = "index.html"

Resource = Union[FileResource, MetaResource]


def normalize_name(name: str) -> str:
    if name.startswith(PRIVATE_PREFIX):
        return name
    name = name.replace("\\", "/")
    if not name.startswith("/"):
        name = "/" + name
    return name


class Site:
    """A site under construction: configuration plus its resource registry.

    Resources are registered by the discovery generators during ``init`` and
    rendered lazily, either all at once to the output directory or one at a
    time for a request path. Names starting with ``:`` are private (layouts,
    post pre-renders) and are never written or served.
    """

    def __init__(self, config: SiteConfig):
        self.config = config
        self.dir = Path(config.dir).resolve()
        self.public_dir = (self.dir / config.public).resolve()
        self.layouts_dir = self.dir / config.layouts
        self.posts_dir = self.dir / config.posts
        self.resources: dict[str, Resource] = {}
        self.renderers = dict(RENDERERS)
        self.generators: list = []

    @property
    def site_meta(self) -> dict:
        return self.config.site_meta()

    def init(self) -> None:
        logger.debug("Root dir is %s", self.dir)
        if not self.public_dir.exists():
            raise MissingOutputDir(f"Public output directory '{self.public_dir}' does not exist")
        if not self.public_dir.is_dir():
            raise MissingOutputDir(f"Public output directory '{self.public_dir}' is not a directory")

        self.renderers = dict(RENDERERS)
        self.generators = [FileGenerator(), LayoutGenerator(), BlogPostGenerator()]
        self.resources = {}
        for i, generator in enumerate(self.generators):
            logger.debug("Invoking generator %d (%s)", i, type(generator).__name__)
            added = generator.discover(self)
            logger.debug("Finished generator %d, %d resources", i, len(added))
        logger.info("Discovered %d resources in %s", len(self.resources), self.dir)

    def add_resource(self, name: str, resource: Resource) -> str:
        name = normalize_name(name)
        logger.debug("Added resource %s", name)
        self.resources[name] = resource
        return name

    def remove_resource(self, name: str) -> None:
        self.resources.pop(normalize_name(name), None)

    def render(self, name: str) -> Payload:
        logger.debug("Normal rendering %s", name)
        resource = self.resources.get(name)
        if resource is None:
            logger.error("Failed to find resource %s", name)
            raise ResourceNotFound(name)
        return resource.render(self)

    def render_bytes(self, name: str) -> bytes:
        payload = self.render(name)
        if isinstance(payload, dict):
            payload = payload.get("content") or ""
        if isinstance(payload, bytes):
            return payload
        return str(payload).encode("utf-8")

    def output_path(self, name: str) -> Path:
        return self.public_dir / name.lstrip("/")

    def render_to_file(self, name: str) -> bool:
        logger.debug("File rendering %s", name)
        out_path = self.output_path(name)
        try:
            data = self.render_bytes(name)
            write_bytes(out_path, data)
        except Exception as exc:
            logger.error("Failed to render %s to %s: %s", name, out_path, exc)
            return False
        logger.debug("Wrote file '%s'", out_path)
        return True

    def public_names(self) -> list[str]:
        return [name for name in self.resources if not name.startswith(PRIVATE_PREFIX)]

    def render_all_to_file(self) -> int:
        logger.debug("Rendering all files")
        names = self.public_names()
        workers = self.config.build_workers
        if workers <= 0:
            workers = os.cpu_count() or 1
        workers = max(1, min(workers, 32, len(names) or 1))
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(self.render_to_file, names))
        else:
            results = [self.render_to_file(name) for name in names]
        written = sum(results)
        logger.info("Wrote %d of %d resources to %s", written, len(names), self.public_dir)
        return written

    def resolve(self, path: str) -> Optional[str]:
        if path.startswith(PRIVATE_PREFIX):
            return None
        if path in self.resources:
            return path
        index_path = posixpath.join(path, INDEX_FILE)
        if index_path in self.resources:
            return index_path
        return None
