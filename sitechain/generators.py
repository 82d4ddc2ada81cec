"""Discovery generators that fill a site's resource registry.

Each generator's ``discover(site)`` registers resources on the site handle it
is given and returns the names it added. ``Site.init`` runs them in order:
pages, layouts, then blog posts.
"""
from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import ConfigError
from .feed import FEED_PATH, build_rss
from .renderers import LAYOUT_PREFIX
from .resources import FileResource, MetaResource
from .utils import is_reserved_name, join_url, walk_files

if TYPE_CHECKING:
    from .site import Site

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = {".md", ".markdown"}
POST_PREFIX = ":blogposts:"
BLOG_ROOT = "/blog"
INDEX_LAYOUT = "blog/index"


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


class FileGenerator:
    def discover(self, site: "Site") -> list[str]:
        added = []
        excluded = {site.public_dir, site.layouts_dir.resolve(), site.posts_dir.resolve()}
        files = walk_files(site.dir, skip=is_reserved_name, max_depth=site.config.max_walk_depth)
        for path in files:
            if excluded.intersection(path.parents):
                continue
            rel = path.relative_to(site.dir).as_posix()
            if path.suffix.lower() in MARKDOWN_SUFFIXES:
                name = rel[: -len(path.suffix)] + ".html"
                renderers = ["yaml", "markdown", "template"]
            else:
                name = rel
                renderers = ["yaml", "template"]
            logger.debug("Discovered file %s", rel)
            added.append(site.add_resource(name, FileResource(path, renderers)))
        return added


class LayoutGenerator:
    def discover(self, site: "Site") -> list[str]:
        layouts_dir = site.layouts_dir
        if not layouts_dir.is_dir():
            raise ConfigError(f"Layouts directory '{layouts_dir}' does not exist")
        added = []
        for path in walk_files(layouts_dir, skip=_is_hidden, max_depth=site.config.max_walk_depth):
            rel = path.relative_to(layouts_dir).with_suffix("").as_posix()
            added.append(site.add_resource(LAYOUT_PREFIX + rel, FileResource(path, ["yaml"])))
        return added


class BlogPostGenerator:
    def __init__(self):
        self.posts: list[dict] = []

    def discover(self, site: "Site") -> list[str]:
        posts_dir = site.posts_dir
        if not posts_dir.is_dir():
            # a site does not have to have a blog
            logger.warning("Failed to read posts dir %s", posts_dir)
            return []
        added = []
        for path in walk_files(posts_dir, skip=_is_hidden, max_depth=site.config.max_walk_depth):
            name = self.discover_post(site, posts_dir, path)
            if name:
                added.append(name)
        added.extend(self.end_discover(site))
        return added

    def discover_post(self, site: "Site", posts_dir: Path, path: Path) -> str:
        rel = path.relative_to(posts_dir).as_posix()
        partial_name = site.add_resource(POST_PREFIX + rel, FileResource(path, ["yaml", "blogpost"]))

        # render the post now so its date and title can be indexed
        logger.debug("Pre-rendering post for meta %s", path)
        try:
            data = site.render(partial_name)
        except Exception as exc:
            logger.error("Failed to render post %s because %s", path, exc)
            site.remove_resource(partial_name)
            return ""
        if not isinstance(data, dict) or data.get("date") is None:
            logger.error("Post at %s does not contain a valid date", path)
            site.remove_resource(partial_name)
            return ""

        date = data["date"]
        stem = path.relative_to(posts_dir).with_suffix("").as_posix()
        permalink = f"{BLOG_ROOT}{date.strftime('/%Y/%m/%d/')}{stem}.html"
        name = site.add_resource(permalink, FileResource(path, ["yaml", "blogpost", "template"]))
        data["path"] = name
        data["url"] = join_url(site.config.url, name)
        self.posts.append(data)
        return name

    def end_discover(self, site: "Site") -> list[str]:
        self.posts.sort(key=lambda post: post["date"])
        added = self.build_pages(site)

        limit = max(0, site.config.feed_limit)
        recent = self.posts[::-1][:limit]
        xml = build_rss(site.site_meta, recent)
        added.append(site.add_resource(FEED_PATH, MetaResource(xml)))
        return added

    def build_pages(self, site: "Site") -> list[str]:
        added = []
        per_page = site.config.page_size
        total_pages = math.ceil(len(self.posts) / per_page)
        for page, start in enumerate(range(0, len(self.posts), per_page)):
            logger.debug("Processing post batch %d", start)
            meta = {
                "page": page,
                "pages": total_pages,
                "posts": len(self.posts),
                "layout": INDEX_LAYOUT,
                "articles": self.posts[start : start + per_page],
            }
            if page > 0:
                meta["prev"] = f"{BLOG_ROOT}/page/{page - 1}"
            if start + per_page < len(self.posts):
                meta["next"] = f"{BLOG_ROOT}/page/{page + 1}"
            resource = MetaResource(meta, ["template"])
            added.append(site.add_resource(f"{BLOG_ROOT}/page/{page}/index.html", resource))
            if page == 0:
                added.append(site.add_resource(f"{BLOG_ROOT}/index.html", resource))
        return added
