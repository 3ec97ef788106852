from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from bson import ObjectId
from werkzeug.datastructures import FileStorage

from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_int, require_object_id
from ..core.enums import DocumentCategory, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import User
from .model import NewDocument, StudyDocument
from .repository import DocumentRepository

logger = logging.getLogger(__name__)

PDF_MIMETYPE = "application/pdf"
PUBLIC_PREFIX = "/documents/"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")
_UNSAFE_PATH_CHARS = re.compile(r"[^a-zA-Z0-9._/-]")


def stored_file_name(original: str, now: datetime) -> str:
    """'<epoch ms>_<original with unsafe chars replaced by _>'."""

    timestamp = int(now.timestamp() * 1000)
    return f"{timestamp}_{_UNSAFE_FILENAME_CHARS.sub('_', original)}"


def sanitize_public_path(file_path: str) -> str:
    return _UNSAFE_PATH_CHARS.sub("", file_path.replace("..", ""))


def _category(value: Any) -> DocumentCategory:
    try:
        return DocumentCategory(value)
    except ValueError:
        raise ValidationError("category không hợp lệ")


def _class_ids(value: Any) -> Tuple[ObjectId, ...]:
    if value in (None, ""):
        return ()
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            raise ValidationError("classes không hợp lệ")
    if not isinstance(value, list):
        raise ValidationError("classes không hợp lệ")
    return tuple(require_object_id(v, "classId") for v in value)


class DocumentService:
    """Use case: giáo viên tải lên tài liệu PDF, học sinh xem tài liệu của lớp mình."""

    def __init__(self, documents: DocumentRepository, classes: ClassRepository, *, storage_dir: Path):
        self._documents = documents
        self._classes = classes
        self._storage_dir = Path(storage_dir)

    def _get(self, document_id: ObjectId) -> StudyDocument:
        document = self._documents.get_by_id(document_id)
        if not document:
            raise NotFoundError("Document not found")
        return document

    def _student_class_ids(self, student_id: ObjectId) -> Sequence[ObjectId]:
        return [c.id for c in self._classes.list_enrolling(student_id)]

    def list_documents(self, user: User) -> Sequence[StudyDocument]:
        if user.role == Role.TEACHER:
            return self._documents.list_all()
        if user.role == Role.STUDENT:
            return self._documents.list_for_classes(self._student_class_ids(user.id))
        raise AuthorizationError("Access denied")

    def get_document(self, document_id: Any) -> StudyDocument:
        return self._get(require_object_id(document_id, "documentId"))

    def upload_document(
        self,
        *,
        uploader_id: ObjectId,
        file: Optional[FileStorage],
        name: Optional[str],
        category: Optional[str],
        classes: Any = None,
        grade: Any = None,
        note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> StudyDocument:
        if not file or not file.filename or not name or not category:
            raise ValidationError("Missing required fields")
        if file.mimetype != PDF_MIMETYPE:
            raise ValidationError("Only PDF files are allowed")

        cat = _category(category)
        class_ids = _class_ids(classes)
        grade_value = require_int(grade, "grade") if grade not in (None, "") else None

        self._storage_dir.mkdir(parents=True, exist_ok=True)
        file_name = stored_file_name(file.filename, now or now_local())
        file.save(str(self._storage_dir / file_name))
        logger.info("Stored document %s (%s)", file_name, file.filename)

        document_id = self._documents.create(
            NewDocument(
                name=name.strip(),
                file_path=f"{PUBLIC_PREFIX}{file_name}",
                file_name=file.filename,
                category=cat,
                classes=class_ids,
                grade=grade_value,
                note=note or None,
                uploaded_by=uploader_id,
            )
        )
        return self._get(document_id)

    def update_document(self, document_id: Any, data: Dict[str, Any]) -> StudyDocument:
        did = require_object_id(document_id, "documentId")
        self._get(did)

        changes: Dict[str, Any] = {}
        if "name" in data:
            changes["name"] = data["name"]
        if "category" in data:
            changes["category"] = _category(data["category"]).value
        if "grade" in data:
            changes["grade"] = require_int(data["grade"], "grade") if data["grade"] not in (None, "") else None
        if "note" in data:
            changes["note"] = data["note"]
        if data.get("classes"):
            changes["classes"] = list(_class_ids(data["classes"]))

        if not self._documents.update(did, changes):
            raise NotFoundError("Document not found")
        return self._get(did)

    def _local_path(self, public_path: str) -> Path:
        return self._storage_dir / Path(sanitize_public_path(public_path)).name

    def delete_document(self, document_id: Any) -> None:
        did = require_object_id(document_id, "documentId")
        document = self._get(did)

        try:
            self._local_path(document.file_path).unlink()
        except OSError as e:
            # The record is removed even when the file is already gone.
            logger.error("Error deleting file %s: %s", document.file_path, e)

        if not self._documents.delete(did):
            raise NotFoundError("Document not found")

    def resolve_file(self, user: User, file_path: Optional[str]) -> Path:
        """Kiểm tra quyền truy cập và trả về đường dẫn file PDF trên đĩa."""

        if not file_path:
            raise ValidationError("File path is required")

        document = self._documents.get_by_file_path(file_path)
        if not document:
            raise NotFoundError("Document not found")

        if user.role == Role.STUDENT:
            allowed = set(self._student_class_ids(user.id))
            if not any(c in allowed for c in document.classes):
                raise AuthorizationError("Access denied")
        elif user.role != Role.TEACHER:
            raise AuthorizationError("Access denied")

        path = self._local_path(file_path)
        if not path.is_file():
            logger.error("Error reading PDF file: %s", path)
            raise NotFoundError("File not found")
        return path
