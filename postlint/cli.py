from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from postlint.config import settings
from postlint.models.post import PostReport
from postlint.services import checker, front_matter


EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def format_text(reports: List[PostReport]) -> str:
    lines: List[str] = []
    errors = warnings = broken = 0
    for report in reports:
        errors += len(report.errors)
        warnings += len(report.warnings)
        broken += len(report.broken_links)
        if not report.issues and not report.broken_links:
            lines.append(f"{report.path}: ok")
            continue
        lines.append(f"{report.path}:")
        for issue in report.issues:
            lines.append(f"  {issue}")
        for result in report.broken_links:
            where = f" (line {result.link.line})" if result.link.line else ""
            status = f"HTTP {result.status}" if result.status else result.detail
            lines.append(f"  error: broken link {result.link.url}{where}: {status}")
    lines.append(
        f"{len(reports)} file(s) checked, {errors} error(s), {warnings} warning(s), {broken} broken link(s)"
    )
    return "\n".join(lines)


def format_json(reports: List[PostReport]) -> str:
    payload = {
        "ok": all(report.ok for report in reports),
        "posts": [report.to_dict() for report in reports],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def run_check(args: argparse.Namespace) -> int:
    options = dict(
        check_links=not args.no_links,
        include_drafts=not args.skip_drafts,
        static_dir=args.static_dir,
    )
    if args.paths:
        missing = [path for path in args.paths if not path.is_file()]
        if missing:
            for path in missing:
                print(f"postlint: no such file: {path}", file=sys.stderr)
            return EXIT_USAGE
        reports = checker.check_paths(args.paths, **options)
    else:
        reports = checker.check_content(args.content_dir, **options)

    output = format_json(reports) if args.format == "json" else format_text(reports)
    print(output)

    if any(not report.ok for report in reports):
        return EXIT_FAILED
    if args.strict and any(report.warnings for report in reports):
        return EXIT_FAILED
    return EXIT_OK


def run_list(args: argparse.Namespace) -> int:
    front_matter.refresh_cache(args.content_dir)
    for post in front_matter.list_posts(include_drafts=args.drafts):
        marker = " [draft]" if post.is_draft else ""
        tags = ", ".join(post.tags)
        print(f"{post.display_date}\t{post.slug}\t{post.title}{marker}\t{tags}")
    return EXIT_OK


def run_tags(args: argparse.Namespace) -> int:
    front_matter.refresh_cache(args.content_dir)
    for item in front_matter.list_tags():
        collection = f" ({item.collection})" if item.collection else ""
        print(f"{item.tag}{collection}\t{item.post_count}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="postlint",
        description="Validate blog post front-matter and check the links posts reference.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument(
        "--content-dir",
        type=Path,
        default=settings.content_dir,
        help="directory scanned for Markdown posts (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="validate posts and report problems")
    check.add_argument("paths", nargs="*", type=Path, help="files to check (default: whole content dir)")
    check.add_argument("--static-dir", type=Path, default=None, help="root for absolute internal links")
    check.add_argument("--no-links", action="store_true", help="skip link resolution")
    check.add_argument("--skip-drafts", action="store_true", help="ignore posts marked as draft")
    check.add_argument("--format", choices=("text", "json"), default="text")
    check.add_argument("--strict", action="store_true", help="treat warnings as failures")
    check.set_defaults(handler=run_check)

    listing = subparsers.add_parser("list", help="list posts, newest first")
    listing.add_argument("--drafts", action="store_true", help="include drafts")
    listing.set_defaults(handler=run_list)

    tags = subparsers.add_parser("tags", help="list tags with post counts")
    tags.set_defaults(handler=run_tags)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return EXIT_USAGE if exc.code else EXIT_OK

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
