from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException, Query

from postlint.services import checker, front_matter, tag_collections


router = APIRouter()


def _post_summary(post) -> Dict[str, Any]:
    data = post.to_dict()
    data["display_date"] = post.display_date
    data["links"] = len(post.links)
    return data


@router.get("/posts", name="post_list")
def post_list(include_drafts: bool = Query(False)) -> List[Dict[str, Any]]:
    return [_post_summary(post) for post in front_matter.list_posts(include_drafts=include_drafts)]


@router.get("/posts/{slug}", name="post_detail")
def post_detail(slug: str) -> Dict[str, Any]:
    post = front_matter.get_post(slug)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    data = _post_summary(post)
    data["body"] = post.body
    data["links"] = [{"url": link.url, "kind": link.kind, "line": link.line} for link in post.links]
    return data


def _collection(collection: tag_collections.TagCollection) -> Dict[str, Any]:
    return {
        "slug": collection.slug,
        "name": collection.name,
        "description": collection.description,
        "color": collection.color,
    }


@router.get("/tags", name="tag_list")
def tag_list() -> List[Dict[str, Any]]:
    collections = {item.slug: _collection(item) for item in tag_collections.list_collections()}
    return [
        {
            "tag": item.tag,
            "label": item.label,
            "collection": collections.get(item.collection) if item.collection else None,
            "post_count": item.post_count,
        }
        for item in front_matter.list_tags()
    ]


@router.get("/collections", name="collection_list")
def collection_list() -> List[Dict[str, Any]]:
    return [_collection(item) for item in tag_collections.list_collections()]


@router.get("/tags/{tag}", name="tag_posts")
def tag_posts(tag: str) -> List[Dict[str, Any]]:
    posts = front_matter.list_posts_by_tag(tag)
    if not posts:
        raise HTTPException(status_code=404, detail="Tag not found")
    return [_post_summary(post) for post in posts]


@router.get("/report", name="content_report")
def content_report(links: bool = Query(False)) -> Dict[str, Any]:
    reports = checker.check_content(front_matter.content_dir(), check_links=links)
    return {
        "ok": all(report.ok for report in reports),
        "posts": [report.to_dict() for report in reports],
    }
