from datetime import datetime

import pytest

from postlint.config import DEFAULT_CONTENT_DIR
from postlint.services import front_matter
from postlint.services.front_matter import FrontMatterError

from conftest import make_post


def test_list_posts_excludes_drafts(content_dir):
    make_post(content_dir, "posts/published.md")
    make_post(content_dir, "posts/wip.md", draft="true")
    front_matter.refresh_cache(content_dir)

    slugs = {post.slug for post in front_matter.list_posts()}
    assert slugs == {"published"}


def test_list_posts_includes_drafts_when_requested(content_dir):
    make_post(content_dir, "published.md")
    make_post(content_dir, "wip.md", draft="true")
    front_matter.refresh_cache(content_dir)

    drafts = [post for post in front_matter.list_posts(include_drafts=True) if post.is_draft]
    assert [post.slug for post in drafts] == ["wip"]


def test_posts_are_ordered_newest_first_with_undated_last(content_dir):
    make_post(content_dir, "old.md", date="2023-05-01")
    make_post(content_dir, "new.md", date="2024-02-01")
    make_post(content_dir, "undated.md", date="''")
    front_matter.refresh_cache(content_dir)

    assert [post.slug for post in front_matter.list_posts()] == ["new", "old", "undated"]


def test_broken_and_empty_files_are_skipped(content_dir):
    make_post(content_dir, "good.md")
    make_post(content_dir, "empty.md", body="")
    (content_dir / "broken.md").write_text("---\ntitle: [unclosed\n---\nbody\n", encoding="utf-8")
    front_matter.refresh_cache(content_dir)

    assert [post.slug for post in front_matter.list_posts()] == ["good"]


def test_duplicate_slugs_keep_first_file(content_dir):
    make_post(content_dir, "a/same.md", title="First")
    make_post(content_dir, "b/same.md", title="Second")
    front_matter.refresh_cache(content_dir)

    post = front_matter.get_post("same")
    assert post is not None
    assert post.title == "First"
    assert len(front_matter.list_posts()) == 1


def test_list_posts_by_tag_is_case_insensitive(content_dir):
    make_post(content_dir, "one.md", tags="Java, docker")
    make_post(content_dir, "two.md", tags="python")
    make_post(content_dir, "three.md", tags="java", draft="true")
    front_matter.refresh_cache(content_dir)

    assert [post.slug for post in front_matter.list_posts_by_tag("JAVA")] == ["one"]
    assert front_matter.list_posts_by_tag("  ") == []


def test_list_tags_counts_published_posts(content_dir):
    make_post(content_dir, "one.md", tags="java, docker")
    make_post(content_dir, "two.md", tags="Java")
    make_post(content_dir, "three.md", tags="docker", draft="true")
    front_matter.refresh_cache(content_dir)

    counts = {item.tag.lower(): item.post_count for item in front_matter.list_tags()}
    assert counts == {"docker": 1, "java": 2}


def test_parse_post_reads_schema_fields(tmp_path):
    path = tmp_path / "My Post.md"
    path.write_text(
        "---\n"
        "title: Images\n"
        "date: 2024-03-11\n"
        "lastmod: '2024-04-02T08:30:00Z'\n"
        "author: Platform Team\n"
        "type: post\n"
        "image: /images/cover.svg\n"
        "tags: docker\n"
        "draft: no\n"
        "summary: Short.\n"
        "series: containers\n"
        "---\n\nBody with a [link](https://example.com).\n",
        encoding="utf-8",
    )
    post = front_matter.parse_post(path)

    assert post.slug == "my-post"
    assert post.metadata.date == datetime(2024, 3, 11)
    assert post.metadata.lastmod == datetime(2024, 4, 2, 8, 30)
    assert post.metadata.tags == ["docker"]
    assert post.metadata.draft is False
    assert post.metadata.image == "/images/cover.svg"
    assert post.metadata.extra == {"series": "containers"}
    assert post.display_date == "Mar 11, 2024"
    assert [link.url for link in post.links] == ["/images/cover.svg", "https://example.com"]


def test_parse_post_rejects_invalid_yaml(tmp_path):
    path = tmp_path / "bad.md"
    path.write_text("---\ntitle: \"unterminated\n---\nbody\n", encoding="utf-8")

    with pytest.raises(FrontMatterError) as excinfo:
        front_matter.parse_post(path)
    assert excinfo.value.path == path
    assert isinstance(excinfo.value, ValueError)


def test_parse_post_rejects_non_mapping_front_matter(tmp_path):
    path = tmp_path / "list.md"
    path.write_text("---\n- one\n- two\n---\nbody\n", encoding="utf-8")

    with pytest.raises(FrontMatterError, match="mapping"):
        front_matter.parse_post(path)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-01-02", datetime(2024, 1, 2)),
        ("2024/01/02", datetime(2024, 1, 2)),
        ("2024-01-02 09:15", datetime(2024, 1, 2, 9, 15)),
        ("2024-01-02T09:15:00+02:00", datetime(2024, 1, 2, 7, 15)),
        ("next tuesday", None),
        (None, None),
    ],
)
def test_parse_date(value, expected):
    assert front_matter.parse_date(value) == expected


def test_normalize_tags_drops_blanks_and_duplicates():
    assert front_matter.normalize_tags(["Java", " ", "java", "SBOM", 3]) == ["Java", "SBOM"]
    assert front_matter.normalize_tags(None) == []


def test_shipped_content_loads():
    front_matter.refresh_cache(DEFAULT_CONTENT_DIR)
    post = front_matter.get_post("java-container-images")
    assert post is not None, "Expected the sample post to be loaded"
    assert "sbom" in post.tags
    assert not post.is_draft
