from __future__ import annotations

import json

import pytest

from sitechain.cli import main

from conftest import front_matter, write


def test_generate_mode(source):
    write(source, "_config.json", json.dumps({"title": "Configured"}))
    write(source, "_layouts/default.html", front_matter(None, "<title>{{ site.title }}</title>{{ content }}"))
    write(source, "_layouts/blog/post.html", front_matter({"layout": "default"}, "<h1>{{ title }}</h1>{{ content }}"))
    write(source, "_layouts/blog/index.html", front_matter(None, "{% for a in articles %}{{ a.path }}{% endfor %}"))
    write(source, "index.md", front_matter(None, "Hello"))
    write(source, "_posts/first.md", front_matter({"title": "First", "date": "2021-05-01"}, "post"))

    assert main([str(source), "--build-workers", "1"]) == 0

    public = source / "_public"
    assert (public / "index.html").read_text(encoding="utf-8") == "<title>Configured</title><p>Hello</p>"
    assert (public / "rss.xml").exists()
    assert (public / "blog" / "2021" / "05" / "01" / "first.html").exists()
    assert not (public / "_config.json").exists()


def test_generate_missing_output_dir(tmp_path):
    write(tmp_path, "_layouts/default.html", "{{ content }}")
    assert main([str(tmp_path)]) == 1
    assert not (tmp_path / "_public").exists()


def test_custom_public_dir(source):
    (source / "out").mkdir()
    write(source, "page.html", "raw")
    assert main([str(source), "--public", "out"]) == 0
    assert (source / "out" / "page.html").read_text(encoding="utf-8") == "raw"


def test_invalid_config(tmp_path, capsys):
    write(tmp_path, "_config.json", "{not json")
    assert main([str(tmp_path)]) == 1
    assert "Invalid JSON" in capsys.readouterr().err


def test_generate_writes_blog_listing(source):
    write(source, "_layouts/blog/post.html", front_matter({"layout": "default"}, "{{ content }}"))
    write(source, "_layouts/blog/index.html", front_matter(None, "{% for a in articles %}{{ a.path }};{% endfor %}"))
    write(source, "_posts/first.md", front_matter({"title": "First", "date": "2021-05-01"}, "post"))

    assert main([str(source)]) == 0

    listing = (source / "_public" / "blog" / "index.html").read_text(encoding="utf-8")
    assert listing == "/blog/2021/05/01/first.html;"
    assert (source / "_public" / "blog" / "page" / "0" / "index.html").read_text(encoding="utf-8") == listing


def test_unknown_log_level_rejected(source, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([str(source), "--log-level", "loud"])
    assert excinfo.value.code == 2
    assert "--log-level" in capsys.readouterr().err


def test_log_level_case_insensitive(source):
    assert main([str(source), "--log-level", "warning"]) == 0
