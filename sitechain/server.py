from __future__ import annotations

import functools
import http.server
import logging
import mimetypes
from urllib.parse import unquote, urlsplit

from .errors import ResourceNotFound
from .site import Site

logger = logging.getLogger(__name__)

DEFAULT_MIME = "text/plain"
NOT_FOUND_BODY = b"Page not found"


def lookup(site: Site, path: str) -> tuple[str, bytes, str]:
    """Render the resource answering ``path``.

    Tries the exact name first, then ``path/index.html``. Returns the resolved
    name, the rendered body and a MIME type guessed from the resolved name.
    """
    name = site.resolve(path)
    if name is None:
        raise ResourceNotFound(path)
    logger.debug("Live render %s", name)
    body = site.render_bytes(name)
    mime = mimetypes.guess_type(name)[0] or DEFAULT_MIME
    return name, body, mime


class LiveRequestHandler(http.server.BaseHTTPRequestHandler):
    """Serves every request by rendering the matching resource on the spot."""

    def __init__(self, *args, site: Site, **kwargs):
        self.site = site
        super().__init__(*args, **kwargs)

    def do_GET(self) -> None:
        self.respond(send_body=True)

    def do_HEAD(self) -> None:
        self.respond(send_body=False)

    def respond(self, send_body: bool) -> None:
        path = unquote(urlsplit(self.path).path)
        logger.info("Rendering '%s'", path)
        if self.site.resolve(path) is None:
            logger.info("404 %s", path)
            self.send_body(404, NOT_FOUND_BODY, DEFAULT_MIME, send_body)
            return
        try:
            _, body, mime = lookup(self.site, path)
        except Exception as exc:
            logger.error("Failed to render %s: %s", path, exc)
            self.send_body(500, b"Render failed", DEFAULT_MIME, send_body)
            return
        self.send_body(200, body, mime, send_body)

    def send_body(self, status: int, body: bytes, mime: str, send_body: bool) -> None:
        self.send_response(status)
        self.send_header("Content-Type", mime)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if send_body:
            self.wfile.write(body)

    def log_message(self, format: str, *args) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


def make_live_server(site: Site, port: int, host: str = "") -> http.server.ThreadingHTTPServer:
    handler = functools.partial(LiveRequestHandler, site=site)
    return http.server.ThreadingHTTPServer((host, port), handler)


def make_static_server(site: Site, port: int, host: str = "") -> http.server.ThreadingHTTPServer:
    handler = functools.partial(http.server.SimpleHTTPRequestHandler, directory=str(site.public_dir))
    return http.server.ThreadingHTTPServer((host, port), handler)


def serve(httpd: http.server.ThreadingHTTPServer) -> None:
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down server.")
    finally:
        httpd.server_close()
