from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple


# 书籍状态（封闭集合，入库存 value）
class BookStatus(str, Enum):
    AVAILABLE = "available"
    BORROWED = "borrowed"
    UNAVAILABLE = "unavailable"


# 评论状态（封闭集合，入库存 value）
class CommentStatus(str, Enum):
    PENDING = "pending"
    PUBLISHED = "published"
    MODERATED = "moderated"


# 展示名
STATUS_LABELS: Dict[str, str] = {
    BookStatus.AVAILABLE.value: "Available",
    BookStatus.BORROWED.value: "Borrowed",
    BookStatus.UNAVAILABLE.value: "Unavailable",
    CommentStatus.PENDING.value: "Pending",
    CommentStatus.PUBLISHED.value: "Published",
    CommentStatus.MODERATED.value: "Moderated",
}


def get_label(status: Enum | str) -> str:
    value = status.value if isinstance(status, Enum) else status
    return STATUS_LABELS.get(value, value)


def list_statuses(enum_cls: type[Enum]) -> Tuple[dict[str, str], ...]:
    return tuple({"value": item.value, "label": get_label(item)} for item in enum_cls)
