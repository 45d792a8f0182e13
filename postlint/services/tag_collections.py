from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from postlint.config import settings

logger = logging.getLogger(__name__)

COLLECTION_FILENAMES = ("tag_collections.yaml", "tag_collections.yml", "tag_collections.json")


@dataclass(slots=True)
class TagCollection:
    slug: str
    name: str
    description: Optional[str]
    color: Optional[str]


@dataclass(slots=True)
class TagBadge:
    tag: str
    label: str
    collection: Optional[TagCollection]


_tag_to_collection: Dict[str, TagCollection] = {}
_collections: List[TagCollection] = []
_loaded = False
_root: Optional[Path] = None


def _read_collections_file(root: Path) -> List[dict]:
    for filename in COLLECTION_FILENAMES:
        path = root / filename
        if not path.exists():
            continue
        try:
            if path.suffix in {".yaml", ".yml"}:
                with path.open("r", encoding="utf-8") as fp:
                    data = yaml.safe_load(fp) or {}
            else:
                data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError, yaml.YAMLError) as exc:
            logger.warning("Failed to load tag collections from %s: %s", path, exc)
            return []

        collections = data.get("collections", []) if isinstance(data, dict) else None
        if not isinstance(collections, list):
            logger.warning("tag collections file %s is not in expected format", path)
            return []
        return collections
    return []


def _clean(value) -> Optional[str]:
    if isinstance(value, str):
        return value.strip() or None
    return None


def _ensure_loaded() -> None:
    global _loaded, _tag_to_collection, _collections
    if _loaded:
        return
    mapping: Dict[str, TagCollection] = {}
    collections: List[TagCollection] = []
    for entry in _read_collections_file(_root or settings.content_dir):
        if not isinstance(entry, dict):
            continue
        name = str(entry.get("name") or "").strip()
        if not name:
            continue
        slug = str(entry.get("slug") or "").strip() or name.lower().replace(" ", "-")
        collection = TagCollection(
            slug=slug,
            name=name,
            description=_clean(entry.get("description")),
            color=_clean(entry.get("color")),
        )
        collections.append(collection)
        tags = entry.get("tags") or []
        if isinstance(tags, str):
            tags = [tags]
        for raw_tag in tags:
            if isinstance(raw_tag, str) and raw_tag.strip():
                mapping[raw_tag.strip().lower()] = collection
    _tag_to_collection = mapping
    _collections = collections
    _loaded = True


def refresh(root: Optional[Path] = None) -> None:
    """Reload the collection mapping from ``root`` (the content directory)."""
    global _loaded, _root
    _root = root
    _loaded = False
    _ensure_loaded()


def list_collections() -> List[TagCollection]:
    _ensure_loaded()
    return list(_collections)


def build_badges(tags: List[str]) -> List[TagBadge]:
    _ensure_loaded()
    badges: List[TagBadge] = []
    for tag in tags:
        collection = _tag_to_collection.get(tag.lower())
        badges.append(
            TagBadge(
                tag=tag,
                label=collection.name if collection else tag,
                collection=collection,
            )
        )
    return badges
