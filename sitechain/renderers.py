"""Renderer steps and the work-list that chains them.

Every step is a plain function ``step(site, chain, payload) -> payload``. The
``chain`` is the pending list of step names for the current render: a step
may push a name back to the front (layout ascent) or clear it to end the
render early (raw files, top of the layout hierarchy).
"""
from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Union

from .content import coerce_date, extract_title, markdown_to_html, split_front_matter
from .errors import ChainDepthExceeded, LayoutCycleError, RendererNotFound
from .render import evaluate, merge_meta

if TYPE_CHECKING:
    from .site import Site

logger = logging.getLogger(__name__)

Payload = Union[bytes, str, dict]
Step = Callable[["Site", "RenderChain", Payload], Payload]

MAX_CHAIN_STEPS = 64
DEFAULT_LAYOUT = "default"
POST_LAYOUT = "blog/post"
LAYOUT_PREFIX = ":layouts:"


def layout_key(layout: str) -> str:
    return LAYOUT_PREFIX + layout.strip("/")


class RenderChain:
    def __init__(self, steps: Optional[Iterable[str]], max_steps: int = MAX_CHAIN_STEPS):
        self.pending: deque[str] = deque(steps or ())
        self.max_steps = max_steps
        self.steps_run = 0
        self.layouts: list[str] = []

    def push_front(self, name: str) -> None:
        self.pending.appendleft(name)

    def stop(self) -> None:
        self.pending.clear()

    def run(self, site: "Site", payload: Payload) -> Payload:
        while self.pending:
            name = self.pending.popleft()
            step = site.renderers.get(name)
            if step is None:
                raise RendererNotFound(name)
            self.steps_run += 1
            if self.steps_run > self.max_steps:
                raise ChainDepthExceeded(f"Render chain ran more than {self.max_steps} steps")
            logger.debug("Running renderer %s", name)
            payload = step(site, self, payload)
        return payload


def as_meta(payload: Payload) -> dict:
    if isinstance(payload, dict):
        return payload
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8", errors="replace")
    return {"content": payload}


def front_matter_step(site: "Site", chain: RenderChain, payload: Payload) -> Payload:
    if isinstance(payload, dict):
        return payload
    if isinstance(payload, bytes):
        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError:
            chain.stop()
            return payload
    else:
        text = payload
    meta = split_front_matter(text)
    if meta is None:
        # no front matter: the raw input is the final output
        chain.stop()
        return payload
    return meta


def template_step(site: "Site", chain: RenderChain, payload: Payload) -> Payload:
    blob = as_meta(payload)
    layout = str(blob.get("layout") or DEFAULT_LAYOUT)
    if layout in chain.layouts:
        raise LayoutCycleError(chain.layouts + [layout])
    chain.layouts.append(layout)
    logger.debug("Layout render loading layout %s", layout)
    parent = as_meta(site.render(layout_key(layout)))

    meta = merge_meta(parent, blob)
    context = merge_meta({"site": site.site_meta}, meta)
    meta["content"] = evaluate(str(parent.get("content") or ""), context)
    meta["layout"] = parent.get("layout")

    if meta["layout"]:
        chain.push_front("template")
        return meta
    chain.stop()
    return meta["content"]


def markdown_step(site: "Site", chain: RenderChain, payload: Payload) -> Payload:
    blob = as_meta(payload)
    blob["content"] = markdown_to_html(str(blob.get("content") or ""))
    if "date" in blob:
        blob["date"] = coerce_date(blob["date"])
    return blob


def blogpost_step(site: "Site", chain: RenderChain, payload: Payload) -> Payload:
    blob = as_meta(payload)
    title, body = extract_title(blob, str(blob.get("content") or ""))
    blob["title"] = title
    blob["content"] = markdown_to_html(body)
    blob["layout"] = blob.get("layout") or POST_LAYOUT
    blob["date"] = coerce_date(blob.get("date"))
    return blob


RENDERERS: dict[str, Step] = {
    "yaml": front_matter_step,
    "template": template_step,
    "markdown": markdown_step,
    "blogpost": blogpost_step,
}
