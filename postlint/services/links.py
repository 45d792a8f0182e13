"""Link extraction and resolution checks for post bodies.

Links are collected from the markdown-it token stream so that inline,
reference-style and autolinks are all seen the same way the renderer would
see them. Nothing is rendered.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional
from urllib.parse import unquote, urlsplit

import httpx
from markdown_it import MarkdownIt

from postlint.config import settings
from postlint.models.post import Link, LinkKind, LinkResult


logger = logging.getLogger(__name__)

_markdown = MarkdownIt("commonmark").enable("table").enable("strikethrough")

FALLBACK_TO_GET = {405, 501}


def classify(url: str) -> LinkKind:
    if url.startswith("#"):
        return "anchor"
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme == "mailto":
        return "mailto"
    if scheme in {"http", "https"} or (not scheme and url.startswith("//")):
        return "external"
    if scheme:
        return "other"
    return "internal"


def extract_links(body: str, *, image: Optional[str] = None) -> List[Link]:
    """Collect link and image targets from a Markdown body, first occurrence wins."""
    found: List[Link] = []
    seen = set()

    def add(url: str, origin: str, line: Optional[int]) -> None:
        url = url.strip()
        if not url or url in seen:
            return
        seen.add(url)
        found.append(Link(url=url, kind=classify(url), origin=origin, line=line))

    if image:
        add(image, "image", None)

    for block in _markdown.parse(body):
        if block.type != "inline" or not block.children:
            continue
        line = block.map[0] + 1 if block.map else None
        for token in block.children:
            if token.type == "link_open":
                add(str(token.attrGet("href") or ""), "body", line)
            elif token.type == "image":
                add(str(token.attrGet("src") or ""), "body", line)
    return found


def check_links(
    links: Iterable[Link],
    *,
    base_dir: Path,
    static_dir: Optional[Path] = None,
    client: Optional[httpx.Client] = None,
    cache: Optional[Dict[str, LinkResult]] = None,
) -> List[LinkResult]:
    """Check that every link resolves, keeping input order.

    Pass the same ``cache`` across calls to fetch each external URL once.
    """
    owns_client = client is None
    if client is None:
        client = httpx.Client(
            follow_redirects=True,
            timeout=settings.link_timeout,
            headers={"User-Agent": settings.user_agent},
        )
    static_root = static_dir or settings.static_dir
    if cache is None:
        cache = {}
    results: List[LinkResult] = []
    try:
        for link in links:
            if link.kind == "external":
                cached = cache.get(link.url)
                if cached is None:
                    cached = _check_external(client, link)
                    cache[link.url] = cached
                results.append(LinkResult(link=link, ok=cached.ok, status=cached.status, detail=cached.detail))
            elif link.kind == "internal":
                results.append(_check_internal(link, base_dir, static_root))
            else:
                results.append(LinkResult(link=link, ok=True, detail="not checked"))
    finally:
        if owns_client:
            client.close()
    return results


def _check_external(client: httpx.Client, link: Link) -> LinkResult:
    url = f"https:{link.url}" if link.url.startswith("//") else link.url
    try:
        response = client.head(url)
        if response.status_code in FALLBACK_TO_GET:
            response = client.get(url)
    except httpx.HTTPError as exc:
        logger.warning("Link check failed for %s: %s", url, exc)
        return LinkResult(link=link, ok=False, detail=str(exc) or exc.__class__.__name__)

    ok = response.status_code < 400
    if not ok:
        logger.warning("Link %s returned HTTP %s", url, response.status_code)
    return LinkResult(link=link, ok=ok, status=response.status_code, detail=response.reason_phrase)


def _check_internal(link: Link, base_dir: Path, static_root: Path) -> LinkResult:
    path_part = unquote(urlsplit(link.url).path)
    if not path_part:
        return LinkResult(link=link, ok=True, detail="same document")

    if path_part.startswith("/"):
        target = static_root / path_part.lstrip("/")
        if not target.resolve().is_relative_to(static_root.resolve()):
            return LinkResult(link=link, ok=False, detail=f"outside static dir {static_root}")
    else:
        target = base_dir / path_part

    if target.exists():
        return LinkResult(link=link, ok=True, detail=str(target))
    return LinkResult(link=link, ok=False, detail=f"missing file {target}")
