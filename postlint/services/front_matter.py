from __future__ import annotations

import logging
import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import frontmatter
import yaml

from postlint.config import settings
from postlint.models.post import Post, PostMetadata, TagSummary
from postlint.services import links as link_service
from postlint.services import tag_collections


logger = logging.getLogger(__name__)

KNOWN_FIELDS = {"title", "date", "lastmod", "author", "type", "image", "tags", "draft", "summary", "slug"}

_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0", ""}

_posts_index: Dict[str, Post] = {}
_ordered_posts: List[Post] = []
_content_dir: Optional[Path] = None


class FrontMatterError(ValueError):
    """Raised when a post's front-matter block cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def iter_sources(content_dir: Path) -> List[Path]:
    if not content_dir.exists():
        return []
    return sorted(path for path in content_dir.rglob("*.md") if path.is_file())


def load_source(path: Path) -> Tuple[Dict[str, Any], str, bool]:
    """Read a Markdown file and split it into raw metadata and body.

    The third element tells whether the file had a front-matter block at all.
    """
    text = path.read_text(encoding="utf-8")
    handler = frontmatter.detect_format(text, frontmatter.handlers)
    if handler is None:
        return {}, text.strip(), False

    try:
        raw_meta, content = handler.split(text)
        meta = handler.load(raw_meta)
    except yaml.YAMLError as exc:
        raise FrontMatterError(path, f"invalid YAML front-matter ({_first_line(exc)})") from exc
    except ValueError as exc:
        raise FrontMatterError(path, f"unreadable front-matter ({_first_line(exc)})") from exc

    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise FrontMatterError(path, "front-matter must be a mapping")
    return dict(meta), content.strip(), True


def build_post(path: Path, meta: Dict[str, Any], body: str) -> Post:
    metadata = PostMetadata(
        title=_as_text(meta.get("title")),
        date=parse_date(meta.get("date")),
        lastmod=parse_date(meta.get("lastmod")),
        author=_as_text(meta.get("author")),
        type=_as_text(meta.get("type")) or "post",
        image=_as_text(meta.get("image")) or None,
        tags=normalize_tags(meta.get("tags")),
        draft=parse_bool(meta.get("draft")),
        summary=_as_text(meta.get("summary")),
        extra={key: value for key, value in meta.items() if key not in KNOWN_FIELDS},
    )
    slug = slugify(str(meta.get("slug") or path.stem))
    links = link_service.extract_links(body, image=metadata.image)
    return Post(slug=slug, path=path, metadata=metadata, body=body, links=links)


def parse_post(path: Path) -> Post:
    meta, body, _ = load_source(path)
    return build_post(path, meta, body)


def refresh_cache(content_dir: Optional[Path] = None) -> None:
    """Load all markdown posts under the content directory into memory."""
    global _posts_index, _ordered_posts, _content_dir

    root = Path(content_dir) if content_dir is not None else settings.content_dir
    _content_dir = root
    tag_collections.refresh(root)

    posts: List[Post] = []
    seen: Dict[str, Path] = {}
    for path in iter_sources(root):
        try:
            post = parse_post(path)
        except (FrontMatterError, OSError, UnicodeDecodeError) as exc:
            logger.exception("Failed to load post %s: %s", path, exc)
            continue

        if not post.body:
            logger.warning("Skipping empty post: %s", path)
            continue

        if post.slug in seen:
            logger.warning("Duplicate slug '%s' in %s (already used by %s)", post.slug, path, seen[post.slug])
            continue
        seen[post.slug] = path
        posts.append(post)

    posts.sort(key=_sort_key, reverse=True)
    _ordered_posts = posts
    _posts_index = {post.slug: post for post in posts}
    logger.debug("Loaded %d posts from %s", len(posts), root)


def content_dir() -> Path:
    return _content_dir if _content_dir is not None else settings.content_dir


def list_posts(*, include_drafts: bool = False) -> List[Post]:
    """Return posts sorted by date, newest first."""
    if include_drafts:
        return list(_ordered_posts)
    return [post for post in _ordered_posts if not post.is_draft]


def get_post(slug: str) -> Optional[Post]:
    return _posts_index.get(slug)


def list_posts_by_tag(tag: str) -> List[Post]:
    """List published posts that carry the given tag (case-insensitive)."""
    normalized = tag.lower().strip()
    if not normalized:
        return []
    return [
        post
        for post in list_posts()
        if any(t.lower() == normalized for t in post.tags)
    ]


def list_tags() -> List[TagSummary]:
    counts: Dict[str, TagSummary] = {}
    for post in list_posts():
        for badge in tag_collections.build_badges(post.tags):
            key = badge.tag.lower()
            summary = counts.get(key)
            if summary is None:
                summary = TagSummary(
                    tag=badge.tag,
                    label=badge.label,
                    collection=badge.collection.slug if badge.collection else None,
                )
                counts[key] = summary
            summary.post_count += 1
    return sorted(counts.values(), key=lambda item: item.tag.lower())


def parse_date(value: Any) -> Optional[datetime]:
    """Coerce a front-matter date value to a naive UTC datetime."""
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return _to_naive_utc(value)

    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())

    if isinstance(value, str):
        text = value.strip()
        for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%Y-%m-%d %H:%M"):
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        try:
            return _to_naive_utc(datetime.fromisoformat(text))
        except ValueError:
            logger.debug("Unrecognized date format '%s'", value)
            return None

    return None


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return bool(value)


def normalize_tags(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, Iterable) and not isinstance(value, (bytes, dict)):
        tags: List[str] = []
        seen = set()
        for item in value:
            if not isinstance(item, str) or not item.strip():
                continue
            tag = item.strip()
            if tag.lower() in seen:
                continue
            seen.add(tag.lower())
            tags.append(tag)
        return tags
    return []


_slug_pattern = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    normalized = value.strip().lower()
    normalized = _slug_pattern.sub("-", normalized)
    normalized = normalized.strip("-")
    return normalized or "post"


def _sort_key(post: Post) -> Tuple[bool, datetime]:
    # undated posts go last when sorted in reverse
    return (post.metadata.date is not None, post.metadata.date or datetime.min)


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _first_line(exc: Exception) -> str:
    return str(exc).strip().splitlines()[0] if str(exc).strip() else exc.__class__.__name__
