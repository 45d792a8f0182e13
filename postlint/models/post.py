from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional


LinkKind = Literal["external", "internal", "anchor", "mailto", "other"]
Severity = Literal["error", "warning"]


@dataclass(slots=True)
class PostMetadata:
    title: str = ""
    date: Optional[datetime] = None
    lastmod: Optional[datetime] = None
    author: str = ""
    type: str = "post"
    image: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    draft: bool = False
    summary: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "date": self.date.isoformat() if self.date else None,
            "lastmod": self.lastmod.isoformat() if self.lastmod else None,
            "author": self.author,
            "type": self.type,
            "image": self.image,
            "tags": list(self.tags),
            "draft": self.draft,
            "summary": self.summary,
        }


@dataclass(slots=True)
class Link:
    url: str
    kind: LinkKind
    origin: Literal["body", "image"] = "body"
    line: Optional[int] = None


@dataclass(slots=True)
class Post:
    slug: str
    path: Path
    metadata: PostMetadata
    body: str
    links: List[Link] = field(default_factory=list)

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def tags(self) -> List[str]:
        return self.metadata.tags

    @property
    def is_draft(self) -> bool:
        return self.metadata.draft

    @property
    def display_date(self) -> str:
        if self.metadata.date is None:
            return "undated"
        return self.metadata.date.strftime("%b %d, %Y")

    def to_dict(self) -> Dict[str, Any]:
        data = {"slug": self.slug, "path": str(self.path)}
        data.update(self.metadata.to_dict())
        return data


@dataclass(slots=True)
class Issue:
    severity: Severity
    field: Optional[str]
    message: str

    def __str__(self) -> str:
        where = f"{self.field}: " if self.field else ""
        return f"{self.severity}: {where}{self.message}"


@dataclass(slots=True)
class LinkResult:
    link: Link
    ok: bool
    status: Optional[int] = None
    detail: str = ""


@dataclass(slots=True)
class PostReport:
    path: Path
    slug: Optional[str] = None
    issues: List[Issue] = field(default_factory=list)
    links: List[LinkResult] = field(default_factory=list)

    @property
    def errors(self) -> List[Issue]:
        return [issue for issue in self.issues if issue.severity == "error"]

    @property
    def warnings(self) -> List[Issue]:
        return [issue for issue in self.issues if issue.severity == "warning"]

    @property
    def broken_links(self) -> List[LinkResult]:
        return [result for result in self.links if not result.ok]

    @property
    def ok(self) -> bool:
        return not self.errors and not self.broken_links

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": str(self.path),
            "slug": self.slug,
            "ok": self.ok,
            "issues": [
                {"severity": issue.severity, "field": issue.field, "message": issue.message}
                for issue in self.issues
            ],
            "links": [
                {
                    "url": result.link.url,
                    "kind": result.link.kind,
                    "ok": result.ok,
                    "status": result.status,
                    "detail": result.detail,
                }
                for result in self.links
            ],
        }


@dataclass(slots=True)
class TagSummary:
    tag: str
    label: str
    collection: Optional[str] = None
    post_count: int = 0
