from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from postlint.config import Settings, settings as default_settings
from postlint.models.post import Issue, Post
from postlint.services import front_matter
from postlint.services.front_matter import FrontMatterError


logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "date", "author", "tags", "summary")


def validate_file(path: Path, settings: Optional[Settings] = None) -> List[Issue]:
    """Validate the front-matter of a single Markdown file."""
    try:
        meta, body, has_block = front_matter.load_source(path)
    except FrontMatterError as exc:
        return [Issue("error", None, exc.reason)]
    except (OSError, UnicodeDecodeError) as exc:
        return [Issue("error", None, f"cannot read file ({exc})")]

    if not has_block:
        return [Issue("error", None, "missing front-matter block")]

    post = front_matter.build_post(path, meta, body)
    return validate_post(post, meta, settings)


def validate_post(post: Post, raw: Dict[str, Any], settings: Optional[Settings] = None) -> List[Issue]:
    """Check a parsed post against its raw front-matter values."""
    settings = settings or default_settings
    issues: List[Issue] = []

    for name in REQUIRED_FIELDS:
        if _is_blank(raw.get(name)):
            issues.append(Issue("error", name, "required field is missing or empty"))

    for name in ("title", "author", "summary", "type"):
        value = raw.get(name)
        if value is not None and not isinstance(value, str):
            issues.append(Issue("error", name, f"must be a string, got {type(value).__name__}"))

    for name in ("date", "lastmod"):
        value = raw.get(name)
        if not _is_blank(value) and getattr(post.metadata, name) is None:
            issues.append(Issue("error", name, f"unrecognized date value {value!r}"))

    issues.extend(_check_tags(raw.get("tags")))

    draft = raw.get("draft")
    if draft is not None and not isinstance(draft, bool):
        issues.append(Issue("error", "draft", f"must be true or false, got {draft!r}"))

    image = raw.get("image")
    if image is not None and not isinstance(image, str):
        issues.append(Issue("error", "image", "must be a string path or URL"))

    published = post.metadata.date
    modified = post.metadata.lastmod
    if published and modified and modified < published:
        issues.append(Issue("error", "lastmod", "is earlier than date"))
    if published and published > _utcnow():
        issues.append(Issue("warning", "date", "is in the future"))

    post_type = post.metadata.type
    if "type" in raw and isinstance(raw.get("type"), str) and post_type not in settings.allowed_types:
        allowed = ", ".join(settings.allowed_types)
        issues.append(Issue("warning", "type", f"'{post_type}' is not one of: {allowed}"))

    summary = post.metadata.summary
    if len(summary) > settings.summary_max:
        issues.append(Issue("warning", "summary", f"longer than {settings.summary_max} characters"))

    for key in sorted(post.metadata.extra):
        issues.append(Issue("warning", key, "unknown front-matter field"))

    if not post.body:
        issues.append(Issue("warning", None, "post body is empty"))

    logger.debug("Validated %s: %d issue(s)", post.path, len(issues))
    return issues


def _check_tags(value: Any) -> List[Issue]:
    if value is None:
        return []
    if isinstance(value, str):
        return [Issue("warning", "tags", "should be a list, got a single string")]
    if not isinstance(value, list):
        return [Issue("error", "tags", f"must be a list, got {type(value).__name__}")]
    issues: List[Issue] = []
    for index, item in enumerate(value):
        if not isinstance(item, str) or not item.strip():
            issues.append(Issue("error", "tags", f"entry {index} is not a non-empty string"))
    seen = set()
    for item in value:
        if isinstance(item, str) and item.strip():
            key = item.strip().lower()
            if key in seen:
                issues.append(Issue("warning", "tags", f"duplicate tag '{item.strip()}'"))
            seen.add(key)
    return issues


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
