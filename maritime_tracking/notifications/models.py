"""
Notification models.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class CommentNotification:
    """A sentinel comment on a tracked task, surfaced in the bell menu."""

    id: str
    task_id: str
    task_title: str
    comment_text: str
    author: str
    created_at: str
    is_new: bool = True

    def mark_read(self) -> CommentNotification:
        return replace(self, is_new=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "task_title": self.task_title,
            "comment_text": self.comment_text,
            "author": self.author,
            "created_at": self.created_at,
            "is_new": self.is_new,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CommentNotification:
        return cls(
            id=str(data["id"]),
            task_id=str(data.get("task_id", "")),
            task_title=data.get("task_title", ""),
            comment_text=data.get("comment_text", ""),
            author=data.get("author", ""),
            created_at=data.get("created_at", ""),
            is_new=bool(data.get("is_new", True)),
        )
