from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Tuple, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_CONTENT_DIR = BASE_DIR / "content"
DEFAULT_STATIC_DIR = BASE_DIR / "static"


def _split(value: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _number(name: str, convert: Callable[[str], T], default: T) -> T:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return convert(raw.strip())
    except ValueError:
        logger.warning("Ignoring %s=%r, not a number; using %s", name, raw, default)
        return default


@dataclass(frozen=True)
class Settings:
    content_dir: Path = DEFAULT_CONTENT_DIR
    static_dir: Path = DEFAULT_STATIC_DIR
    link_timeout: float = 10.0
    user_agent: str = "postlint/0.1 (link checker)"
    allowed_types: Tuple[str, ...] = field(default=("post", "page"))
    summary_max: int = 300


def load_settings() -> Settings:
    """Build settings from POSTLINT_* environment variables."""
    defaults = Settings()
    return Settings(
        content_dir=Path(os.getenv("POSTLINT_CONTENT_DIR", str(defaults.content_dir))).expanduser(),
        static_dir=Path(os.getenv("POSTLINT_STATIC_DIR", str(defaults.static_dir))).expanduser(),
        link_timeout=_number("POSTLINT_LINK_TIMEOUT", float, defaults.link_timeout),
        user_agent=os.getenv("POSTLINT_USER_AGENT", defaults.user_agent),
        allowed_types=_split(os.getenv("POSTLINT_ALLOWED_TYPES", "")) or defaults.allowed_types,
        summary_max=_number("POSTLINT_SUMMARY_MAX", int, defaults.summary_max),
    )


settings = load_settings()
