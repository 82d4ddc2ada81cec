from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .config import SiteConfig, find_config, load_config
from .errors import SiteError
from .server import make_live_server, make_static_server, serve
from .site import Site
from .utils import parse_int

logger = logging.getLogger(__name__)

MODES = ("generate", "live", "static")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("MARKDOWN").setLevel(logging.WARNING)


def generate(site: Site) -> int:
    start = time.perf_counter()
    written = site.render_all_to_file()
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"Site generated in: {site.public_dir} ({written} files)")
    return 0


def live(site: Site, port: int) -> int:
    httpd = make_live_server(site, port)
    logger.info("Serving live site on port %d from src %s", port, site.dir)
    serve(httpd)
    return 0


def static(site: Site, port: int) -> int:
    httpd = make_static_server(site, port)
    logger.info("Serving site on port %d from dir %s", port, site.public_dir)
    serve(httpd)
    return 0


def build_parser(
    config: dict, source_dir: str, config_path: str, add_help: bool = True
) -> argparse.ArgumentParser:
    def cfg_str(key: str, default: str) -> str:
        value = config.get(key)
        return default if value is None else str(value)

    def cfg_int(key: str, default: int) -> int:
        return parse_int(config.get(key), default)

    parser = argparse.ArgumentParser(
        prog="sitechain",
        description="Static site generator: pages, layouts and a blog.",
        add_help=add_help,
    )
    parser.add_argument("dir", nargs="?", default=source_dir, help="Site source directory.")
    parser.add_argument("--config", default=config_path, help="Path to site config file (JSON/TOML/YAML).")
    parser.add_argument(
        "-m",
        "--mode",
        choices=MODES,
        default=cfg_str("mode", "generate"),
        help="Mode of operation.",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=cfg_int("port", 8080),
        help="TCP port at which the files will be served.",
    )
    parser.add_argument("--public", default=cfg_str("public", "_public"), help="Location for output files.")
    parser.add_argument("--layouts", default=cfg_str("layouts", "_layouts"), help="Location for layout files.")
    parser.add_argument("--posts", default=cfg_str("posts", "_posts"), help="Location for blog posts.")
    parser.add_argument(
        "--build-workers",
        type=int,
        default=cfg_int("build_workers", 0),
        help="Number of worker threads for rendering (0 = auto).",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Shorthand for --log-level DEBUG.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    pre_parser = build_parser({}, ".", "", add_help=False)
    pre_args, _ = pre_parser.parse_known_args(argv)

    config_path = Path(pre_args.config) if pre_args.config else find_config(Path(pre_args.dir))
    try:
        config = load_config(config_path) if config_path else {}
    except SiteError as exc:
        print(exc, file=sys.stderr)
        return 1

    parser = build_parser(config, pre_args.dir, pre_args.config)
    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.verbose else args.log_level)

    config.update(
        {
            "dir": args.dir,
            "mode": args.mode,
            "port": args.port,
            "public": args.public,
            "layouts": args.layouts,
            "posts": args.posts,
            "build_workers": args.build_workers,
        }
    )
    try:
        site = Site(SiteConfig.from_mapping(config))
        site.init()
    except (SiteError, OSError) as exc:
        logger.error("An error occurred during generation: %s", exc)
        return 1

    if args.mode == "live":
        return live(site, args.port)
    if args.mode == "static":
        return static(site, args.port)
    return generate(site)


if __name__ == "__main__":
    raise SystemExit(main())
