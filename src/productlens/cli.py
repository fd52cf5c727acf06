# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""productlens CLI: analyze saved documents, watch live pages.

Usage:
    productlens analyze FILE --url URL [--global NAME ...] [--compact | --summary]
    productlens watch URL [--seconds N] [--headed]

``watch`` prints a JSON pass summary on exit when PRODUCTLENS_TELEMETRY=1.

Exit codes (analyze):
    0  record extracted
    2  not a product page
    3  product page without an extractable title
    1  usage, input or configuration error
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from . import logging_config, telemetry
from .config import load_config
from .document import DocumentSnapshot
from .errors import ConfigError, MissingRequiredField, NotAProductPage
from .pipeline import analyze_document
from .serializer import to_json, to_summary

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_A_PRODUCT = 2
EXIT_NOT_EXTRACTABLE = 3


def _require_browser_deps() -> None:
    """Check that the browser extra is installed."""
    try:
        import playwright.async_api  # noqa: F401
    except ImportError as e:
        print(
            f"Missing browser dependency: {e.name}\nInstall with: pip install productlens[browser]",
            file=sys.stderr,
        )
        sys.exit(EXIT_ERROR)


def _read_document(path_str: str) -> str:
    if path_str == "-":
        return sys.stdin.read()
    return Path(path_str).read_text(encoding="utf-8", errors="replace")


def cmd_analyze(args: argparse.Namespace) -> int:
    """Analyze one saved HTML document."""
    try:
        html = _read_document(args.file)
    except OSError as e:
        print(f"Error: cannot read {args.file}: {e.strerror or e}", file=sys.stderr)
        return EXIT_ERROR

    config = load_config()
    snapshot = DocumentSnapshot.from_html(html, args.url, frozenset(args.globals or ()))
    result = analyze_document(snapshot, config)

    if args.summary:
        print(to_summary(result))
    else:
        print(to_json(result, indent=None if args.compact else 2))

    try:
        result.raise_for_outcome()
    except NotAProductPage as e:
        logger.info("Not a product page (%s): %s", e.layer, e)
        return EXIT_NOT_A_PRODUCT
    except MissingRequiredField as e:
        logger.info("Missing required field %s: %s", e.field, e)
        return EXIT_NOT_EXTRACTABLE
    return EXIT_OK


async def _watch(url: str, *, seconds: float, headed: bool) -> None:
    from playwright.async_api import async_playwright

    from .browser_binding import PlaywrightDocumentSource, attach_page
    from .navigation_monitor import NavigationMonitor

    def on_result(result) -> None:
        print(to_summary(result), flush=True)

    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=not headed)
        try:
            page = await browser.new_page()
            monitor = NavigationMonitor(PlaywrightDocumentSource(page), on_result, config=load_config())
            await attach_page(page, monitor)
            await page.goto(url, wait_until="domcontentloaded")
            await asyncio.sleep(seconds)
            await monitor.stop()
        finally:
            await browser.close()


def cmd_watch(args: argparse.Namespace) -> int:
    """Open a live page and print one summary line per analysis pass."""
    _require_browser_deps()
    collector = telemetry.configure_from_env()
    asyncio.run(_watch(args.url, seconds=args.seconds, headed=args.headed))
    if collector is not None:
        print(json.dumps({"summary": telemetry.outcome_summary()}), flush=True)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Product page analyzer",
        prog="productlens",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines on stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_analyze = subparsers.add_parser(
        "analyze",
        help="Analyze a saved HTML document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  %(prog)s page.html --url https://shop.example/products/mug
  %(prog)s - --url https://www.amazon.com/dp/B0TEST --compact < page.html
  %(prog)s page.html --url https://store.example/p/1 --global Shopify""",
    )
    p_analyze.add_argument("file", metavar="FILE", help="HTML file, or - for stdin")
    p_analyze.add_argument("--url", required=True, metavar="URL", help="URL the document was loaded from")
    p_analyze.add_argument(
        "--global",
        dest="globals",
        action="append",
        metavar="NAME",
        help="Marker global present on the page (repeatable)",
    )
    output = p_analyze.add_mutually_exclusive_group()
    output.add_argument("--compact", action="store_true", help="Single-line JSON")
    output.add_argument("--summary", action="store_true", help="One-line human summary instead of JSON")

    p_watch = subparsers.add_parser("watch", help="Monitor a live page with a browser (needs the browser extra)")
    p_watch.add_argument("url", metavar="URL")
    p_watch.add_argument("--seconds", type=float, default=30.0, help="How long to keep watching (default: 30)")
    p_watch.add_argument("--headed", action="store_true", help="Show the browser window")

    commands = {"analyze": cmd_analyze, "watch": cmd_watch}

    args = parser.parse_args(argv)

    logging_config.configure(json_output=args.json_logs, level="DEBUG" if args.verbose else "WARNING")

    try:
        return commands[args.command](args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
