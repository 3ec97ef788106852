from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from bson import ObjectId

from ..core.enums import DocumentCategory


@dataclass(frozen=True)
class StudyDocument:
    """Tài liệu PDF giáo viên phát cho các lớp."""

    id: ObjectId
    name: str
    file_path: str
    file_name: str
    category: DocumentCategory
    classes: Tuple[ObjectId, ...] = ()
    grade: Optional[int] = None
    note: Optional[str] = None
    uploaded_by: Optional[ObjectId] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewDocument:
    name: str
    file_path: str
    file_name: str
    category: DocumentCategory
    classes: Tuple[ObjectId, ...] = ()
    grade: Optional[int] = None
    note: Optional[str] = None
    uploaded_by: Optional[ObjectId] = None
