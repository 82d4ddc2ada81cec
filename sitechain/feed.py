from __future__ import annotations

import datetime as dt
import html

from .utils import join_url, rfc822_date

FEED_PATH = "/rss.xml"


def build_rss(site_meta: dict, posts: list[dict]) -> str:
    """Serialize ``posts`` (newest first) as an RSS 2.0 document."""
    site_url = str(site_meta.get("url") or "").rstrip("/")
    default_author = str(site_meta.get("author") or "")
    items = []
    for post in posts:
        link = join_url(site_url, post["path"])
        author = str(post.get("author") or default_author)
        lines = [
            "<item>",
            f"<title>{html.escape(str(post.get('title') or ''))}</title>",
            f"<link>{html.escape(link)}</link>",
            f'<guid isPermaLink="true">{html.escape(link)}</guid>',
            f"<pubDate>{rfc822_date(post['date'])}</pubDate>",
            f"<description>{html.escape(str(post.get('content') or ''))}</description>",
        ]
        if author:
            lines.append(f"<dc:creator>{html.escape(author)}</dc:creator>")
        lines.append("</item>")
        items.append("\n".join(lines))
    if posts:
        last_build = rfc822_date(posts[0]["date"])
    else:
        last_build = rfc822_date(dt.datetime.now(dt.timezone.utc))
    channel = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/" '
        'xmlns:atom="http://www.w3.org/2005/Atom">',
        "<channel>",
        f"<title>{html.escape(str(site_meta.get('title') or ''))}</title>",
        f"<link>{html.escape(site_url)}/</link>",
        f"<description>{html.escape(str(site_meta.get('description') or ''))}</description>",
        f'<atom:link href="{html.escape(join_url(site_url, FEED_PATH))}" rel="self" type="application/rss+xml" />',
        f"<lastBuildDate>{last_build}</lastBuildDate>",
    ]
    if default_author:
        channel.append(f"<dc:creator>{html.escape(default_author)}</dc:creator>")
    channel.extend(items)
    channel.extend(["</channel>", "</rss>"])
    return "\n".join(channel)
