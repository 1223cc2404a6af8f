"""CLI entry point: python -m pagedigest URL [options]"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pagedigest import settings
from pagedigest.items import StructuredResult
from pagedigest.query import PageDigestError, extract, fetch, resolve_options

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagedigest",
        description=(
            "Fetch a web page and print a structured digest of it:\n"
            "metadata, main content, related links, navigation and access issues."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("url", nargs="?", default=None, metavar="URL",
                        help="Page URL to fetch (omit when using --file)")
    parser.add_argument("--file", default=None, metavar="PATH",
                        help="Read HTML from a local file instead of fetching")
    parser.add_argument("--base-url", default="", metavar="URL",
                        help="Base URL for relative links when using --file")
    parser.add_argument("--mode", default="standard",
                        choices=["light", "standard", "full"],
                        help="Extraction mode (default: standard)")
    parser.add_argument("--format", dest="content_format", default="text",
                        choices=["text", "html", "both"],
                        help="Content format (default: text)")
    parser.add_argument("--max-length", type=int, default=None, metavar="N",
                        help="Truncate content to N characters")
    parser.add_argument("--no-issues", action="store_true", default=False,
                        help="Skip paywall / login / partial-content detection")
    parser.add_argument("--no-related", action="store_true", default=False,
                        help="Skip related-link extraction")
    parser.add_argument("--navigation", action="store_true", default=False,
                        help="Extract sidebar / menu / TOC links")
    parser.add_argument("--timeout", type=int, default=settings.TIMEOUT, metavar="SECS",
                        help=f"Network timeout in seconds (default: {settings.TIMEOUT})")
    parser.add_argument("--json", action="store_true", default=False,
                        help="Print the JSON payload instead of a summary")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help="Logging level (default: WARNING)")
    return parser


def _options_from_args(args: argparse.Namespace) -> dict[str, Any]:
    options: dict[str, Any] = {
        "mode": args.mode,
        "content_format": args.content_format,
        "max_content_length": args.max_length,
        "extract_navigation_links": args.navigation,
    }
    if args.no_issues:
        options["detect_issues"] = False
    if args.no_related:
        options["extract_related_links"] = False
    return options


def _print_summary(console: Console, result: StructuredResult) -> None:
    meta = result.metadata
    content = result.content
    lines = [
        f"[bold cyan]{(meta.title if meta else None) or '(untitled)'}[/bold cyan]",
        f"URL:          [green]{result.url}[/green]",
        f"Mode:         {result.mode}",
    ]
    if meta is not None:
        lines.append(f"Author:       {meta.author or '-'}")
        lines.append(f"Published:    {meta.published_date or '-'}")
    if content.text_length is not None:
        lines.append(f"Text:         {content.text_length:,} chars")
    if content.html_length is not None:
        lines.append(f"HTML:         {content.html_length:,} chars")
    if content.truncated:
        lines.append("[yellow]Text truncated[/yellow]")
    if content.html_truncated:
        lines.append("[yellow]HTML truncated[/yellow]")
    console.print(Panel.fit("\n".join(lines), border_style="cyan", title="[bold]Page[/bold]"))

    if result.issues:
        for issue in result.issues:
            console.print(f"[bold red]{issue.type}[/bold red]  {issue.message}")

    if result.related_links:
        tbl = Table(
            title=f"[bold green]Related Links ({len(result.related_links)})[/bold green]",
            box=box.SIMPLE_HEAVY,
        )
        tbl.add_column("#",    style="dim",  justify="right", width=4, no_wrap=True)
        tbl.add_column("Type", style="cyan", width=9,         no_wrap=True)
        tbl.add_column("Text", style="bold", max_width=45,    no_wrap=True)
        tbl.add_column("URL",  style="blue", max_width=60,    no_wrap=True)
        for i, link in enumerate(result.related_links, 1):
            tbl.add_row(str(i), link.type, link.text[:45], link.url)
        console.print(tbl)

    if result.navigation_links:
        ntbl = Table(
            title=f"[bold green]Navigation ({len(result.navigation_links)})[/bold green]",
            box=box.SIMPLE_HEAVY,
        )
        ntbl.add_column("Lvl",  style="dim",  justify="right", width=4, no_wrap=True)
        ntbl.add_column("Text", style="bold", max_width=45,    no_wrap=True)
        ntbl.add_column("URL",  style="blue", max_width=60,    no_wrap=True)
        for link in result.navigation_links:
            ntbl.add_row(str(link.level or "-"), link.text[:45], link.url)
        console.print(ntbl)

    if content.text:
        preview = content.text[:500] + ("..." if len(content.text) > 500 else "")
        console.print(Panel(preview, title="[bold]Text preview[/bold]", border_style="dim"))


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.url and not args.file:
        parser.error("a URL or --file is required")

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        options = resolve_options(_options_from_args(args))
        if args.file:
            html = Path(args.file).read_text(encoding="utf-8", errors="replace")
            result = extract(html, args.base_url or args.url or "", options)
        else:
            result = fetch(args.url, options, timeout=args.timeout)
    except PageDigestError as exc:
        print(json.dumps({"error": exc.to_dict()}, ensure_ascii=False), file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"ERROR: Could not read {args.file}: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_payload(), ensure_ascii=False, indent=2))
    else:
        _print_summary(Console(), result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
