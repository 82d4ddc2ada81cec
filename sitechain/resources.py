from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

from .renderers import Payload, RenderChain

if TYPE_CHECKING:
    from .site import Site

logger = logging.getLogger(__name__)


class FileResource:
    """Output backed by a source file, rendered through ``renderers``."""

    def __init__(self, path: Path, renderers: Optional[Sequence[str]]):
        self.path = path
        self.renderers = list(renderers or ())
        logger.debug("Created file resource at %s", path)

    def render(self, site: "Site") -> Payload:
        try:
            data = self.path.read_bytes()
        except OSError:
            logger.error("Failed to read file at %s", self.path)
            raise
        logger.debug("Loaded resource from file %s", self.path)
        return RenderChain(self.renderers, site.config.max_chain_steps).run(site, data)

    def __repr__(self) -> str:
        return f"FileResource({str(self.path)!r}, {self.renderers!r})"


class MetaResource:
    """Output backed by an in-memory value, such as a listing page or a feed."""

    def __init__(self, meta: Payload, renderers: Optional[Sequence[str]] = None):
        self.meta = meta
        self.renderers = list(renderers or ())

    def render(self, site: "Site") -> Payload:
        # renderers mutate dict payloads, so each render gets its own copy
        payload = copy.copy(self.meta) if isinstance(self.meta, dict) else self.meta
        return RenderChain(self.renderers, site.config.max_chain_steps).run(site, payload)

    def __repr__(self) -> str:
        return f"MetaResource({type(self.meta).__name__}, {self.renderers!r})"
