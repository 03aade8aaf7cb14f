"""
Sentinel-filtered task comments.

Operators mark client-visible comments in Asana by starting them with "&".
Only those comments (with a known author) are shown on the dashboard, with
the sentinel stripped, newest first.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from maritime_tracking.config import COMMENT_FILTERS, COMMENT_SENTINEL

__all__ = ["COMMENT_FILTERS", "TaskComment", "filter_sentinel_comments", "parse_timestamp"]

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an Asana ISO timestamp ("2024-01-15T10:00:00.000Z") as aware UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass(frozen=True)
class TaskComment:
    id: str
    text: str
    author: str
    created_at: str

    @property
    def created(self) -> datetime:
        return parse_timestamp(self.created_at) or _EPOCH

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "author": self.author,
            "created_at": self.created_at,
        }


def filter_sentinel_comments(
    stories: Iterable[Mapping[str, Any]],
    sentinel: str = COMMENT_SENTINEL,
) -> list[TaskComment]:
    """Keep stories starting with ``sentinel`` that have an author; newest first."""
    comments: list[TaskComment] = []
    for story in stories:
        text = story.get("text")
        if not isinstance(text, str):
            continue
        stripped = text.strip()
        if not stripped.startswith(sentinel):
            continue
        author = (story.get("created_by") or {}).get("name")
        if not author:
            continue
        comments.append(
            TaskComment(
                id=str(story.get("gid") or ""),
                text=stripped[len(sentinel):].strip(),
                author=author,
                created_at=story.get("created_at") or "",
            )
        )

    comments.sort(key=lambda comment: comment.created, reverse=True)
    return comments
