from __future__ import annotations

import threading
import urllib.error
import urllib.request

import pytest

from sitechain.config import SiteConfig
from sitechain.errors import ResourceNotFound
from sitechain.resources import MetaResource
from sitechain.server import lookup, make_live_server, make_static_server
from sitechain.site import Site

from conftest import front_matter, write


@pytest.fixture
def site(tmp_path):
    site = Site(SiteConfig(dir=str(tmp_path)))
    site.add_resource("/blog/index.html", MetaResource("<ul></ul>"))
    site.add_resource("/rss.xml", MetaResource("<rss/>"))
    site.add_resource("/LICENSE", MetaResource("MIT"))
    return site


def test_lookup_exact(site):
    assert lookup(site, "/blog/index.html") == ("/blog/index.html", b"<ul></ul>", "text/html")


def test_lookup_index_fallback(site):
    name, body, mime = lookup(site, "/blog/")
    assert name == "/blog/index.html"
    assert body == b"<ul></ul>"
    assert mime == "text/html"


def test_lookup_default_mime(site):
    assert lookup(site, "/LICENSE")[2] == "text/plain"


def test_lookup_not_found(site):
    with pytest.raises(ResourceNotFound):
        lookup(site, "/nowhere/")


@pytest.fixture
def running(request):
    servers = []

    def start(httpd):
        thread = threading.Thread(target=httpd.serve_forever, daemon=True)
        thread.start()
        servers.append(httpd)
        return f"http://127.0.0.1:{httpd.server_address[1]}"

    yield start
    for httpd in servers:
        httpd.shutdown()
        httpd.server_close()


def test_live_server(site, running):
    base = running(make_live_server(site, 0, "127.0.0.1"))

    with urllib.request.urlopen(base + "/blog/") as response:
        assert response.status == 200
        assert response.headers["Content-Type"] == "text/html"
        assert response.read() == b"<ul></ul>"

    with pytest.raises(urllib.error.HTTPError) as excinfo:
        urllib.request.urlopen(base + "/missing.html")
    assert excinfo.value.code == 404


def test_live_server_render_failure(site, running):
    site.add_resource("/broken.html", MetaResource(front_matter({"layout": "ghost"}, "x"), ["yaml", "template"]))
    base = running(make_live_server(site, 0, "127.0.0.1"))

    with pytest.raises(urllib.error.HTTPError) as excinfo:
        urllib.request.urlopen(base + "/broken.html")
    assert excinfo.value.code == 500


def test_static_server(tmp_path, running):
    (tmp_path / "_public").mkdir()
    write(tmp_path, "_public/index.html", "generated")
    site = Site(SiteConfig(dir=str(tmp_path)))
    base = running(make_static_server(site, 0, "127.0.0.1"))

    with urllib.request.urlopen(base + "/") as response:
        assert response.read() == b"generated"
