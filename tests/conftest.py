from pathlib import Path

import pytest

from postlint.services import front_matter


VALID_FRONT_MATTER = """---
title: "{title}"
date: {date}
author: "Jane Doe"
tags: [{tags}]
draft: {draft}
summary: "A short summary."
---
"""


def make_post(
    root: Path,
    name: str,
    *,
    title: str = "Hello",
    date: str = "2024-01-01",
    tags: str = "java, docker",
    draft: str = "false",
    body: str = "Some body text.",
) -> Path:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    header = VALID_FRONT_MATTER.format(title=title, date=date, tags=tags, draft=draft)
    path.write_text(f"{header}\n{body}\n", encoding="utf-8")
    return path


@pytest.fixture
def content_dir(tmp_path):
    root = tmp_path / "content"
    root.mkdir()
    yield root
    front_matter.refresh_cache(root / "missing")
