from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import httpx

from postlint.config import settings
from postlint.models.post import LinkResult, PostReport
from postlint.services import front_matter, links, validator
from postlint.services.front_matter import FrontMatterError


logger = logging.getLogger(__name__)


def check_paths(
    paths: Iterable[Path],
    *,
    check_links: bool = True,
    include_drafts: bool = True,
    static_dir: Optional[Path] = None,
    client: Optional[httpx.Client] = None,
) -> List[PostReport]:
    """Validate each file and, optionally, resolve the links it references."""
    owns_client = check_links and client is None
    if owns_client:
        client = httpx.Client(
            follow_redirects=True,
            timeout=settings.link_timeout,
            headers={"User-Agent": settings.user_agent},
        )

    link_cache: Dict[str, LinkResult] = {}
    reports: List[PostReport] = []
    try:
        for path in paths:
            report = _check_one(
                Path(path),
                check_links=check_links,
                include_drafts=include_drafts,
                static_dir=static_dir,
                client=client,
                link_cache=link_cache,
            )
            if report is not None:
                reports.append(report)
    finally:
        if owns_client and client is not None:
            client.close()
    return reports


def check_content(
    content_dir: Optional[Path] = None,
    *,
    check_links: bool = True,
    include_drafts: bool = True,
    static_dir: Optional[Path] = None,
    client: Optional[httpx.Client] = None,
) -> List[PostReport]:
    root = Path(content_dir) if content_dir is not None else settings.content_dir
    sources = front_matter.iter_sources(root)
    if not sources:
        logger.warning("No Markdown files found under %s", root)
    return check_paths(
        sources,
        check_links=check_links,
        include_drafts=include_drafts,
        static_dir=static_dir,
        client=client,
    )


def _check_one(
    path: Path,
    *,
    check_links: bool,
    include_drafts: bool,
    static_dir: Optional[Path],
    client: Optional[httpx.Client],
    link_cache: Dict[str, LinkResult],
) -> Optional[PostReport]:
    report = PostReport(path=path)
    report.issues = validator.validate_file(path)
    try:
        post = front_matter.parse_post(path)
    except (FrontMatterError, OSError, UnicodeDecodeError):
        return report

    if post.is_draft and not include_drafts:
        logger.debug("Skipping draft %s", path)
        return None

    report.slug = post.slug
    if check_links and post.links:
        report.links = links.check_links(
            post.links,
            base_dir=path.parent,
            static_dir=static_dir,
            client=client,
            cache=link_cache,
        )
    return report
