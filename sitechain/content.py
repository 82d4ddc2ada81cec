from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Optional

import markdown
import yaml

logger = logging.getLogger(__name__)

FRONT_MATTER_END_RE = re.compile(r"---\r?\n\r?\n")
DOCUMENT_MARKER = "---"
DATE_FORMATS = ("%Y-%m-%d %H:%M", "%Y/%m/%d", "%b %d, %Y", "%d %b %Y")
MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "toc", "codehilite"]


def parse_meta_block(block: str) -> dict:
    if block.strip() in {"", DOCUMENT_MARKER}:
        # an empty block has nothing for the parser to read
        return {}
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        logger.error("Failed to parse front matter: %s", exc)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.error("Front matter must be a mapping, got %s", type(data).__name__)
        return {}
    return data


def split_front_matter(text: str) -> Optional[dict]:
    """Split ``text`` into a metadata record and its body.

    The metadata block ends at the first ``---`` line followed by a blank line
    and may open with a ``---`` document marker. The body lands in the
    record's ``content`` field. Returns ``None`` when there is no such
    delimiter, in which case callers treat the whole text as final output.
    """
    clean_text = text.lstrip("\ufeff")
    match = FRONT_MATTER_END_RE.search(clean_text)
    if match is None:
        return None
    head = clean_text[: match.start()].replace("\r\n", "\n")
    body = clean_text[match.end() :]
    meta = parse_meta_block(head)
    meta["content"] = body
    return meta


def extract_title(meta: dict, body: str) -> tuple[str, str]:
    if meta.get("title"):
        return str(meta["title"]), body
    lines = body.splitlines()
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("# "):
            title = stripped[2:].strip() or "Untitled"
            new_body = "\n".join(lines[i + 1 :]).lstrip()
            return title, new_body
        if stripped:
            break
    return "Untitled", body


def coerce_date(value: object) -> Optional[dt.datetime]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, dt.datetime):
        parsed = value
    elif isinstance(value, dt.date):
        parsed = dt.datetime.combine(value, dt.time())
    elif isinstance(value, str):
        parsed = _parse_date_text(value.strip())
        if parsed is None:
            return None
    else:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return parsed


def _parse_date_text(value: str) -> Optional[dt.datetime]:
    if not value:
        return None
    try:
        return dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return dt.datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def markdown_to_html(text: str) -> str:
    md = markdown.Markdown(
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs={"codehilite": {"guess_lang": False}},
    )
    return md.convert(text)
