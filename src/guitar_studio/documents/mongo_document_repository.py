from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Sequence

from bson import ObjectId
from pymongo import DESCENDING

from ..core.enums import DocumentCategory
from ..database.connection import DatabaseConnection
from ..database.mongo_base import prune_none, stamp_created, stamp_updated
from .model import NewDocument, StudyDocument
from .repository import DocumentRepository


def _to_document(doc: dict) -> StudyDocument:
    return StudyDocument(
        id=doc["_id"],
        name=doc.get("name", ""),
        file_path=doc.get("filePath", ""),
        file_name=doc.get("fileName", ""),
        category=DocumentCategory(doc["category"]),
        classes=tuple(ObjectId(str(c)) for c in doc.get("classes") or []),
        grade=doc.get("grade"),
        note=doc.get("note"),
        uploaded_by=doc.get("uploadedBy"),
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


class MongoDocumentRepository(DocumentRepository):
    def __init__(self, conn: DatabaseConnection):
        self._conn = conn

    @property
    def _documents(self):
        return self._conn.db()["documents"]

    def list_all(self) -> Sequence[StudyDocument]:
        return [_to_document(d) for d in self._documents.find({}).sort("createdAt", DESCENDING)]

    def list_for_classes(self, class_ids: Iterable[ObjectId]) -> Sequence[StudyDocument]:
        cursor = self._documents.find({"classes": {"$in": list(class_ids)}}).sort("createdAt", DESCENDING)
        return [_to_document(d) for d in cursor]

    def get_by_id(self, document_id: ObjectId) -> Optional[StudyDocument]:
        doc = self._documents.find_one({"_id": document_id})
        return _to_document(doc) if doc else None

    def get_by_file_path(self, file_path: str) -> Optional[StudyDocument]:
        doc = self._documents.find_one({"filePath": file_path})
        return _to_document(doc) if doc else None

    def create(self, document: NewDocument) -> ObjectId:
        doc = prune_none(
            {
                "name": document.name,
                "filePath": document.file_path,
                "fileName": document.file_name,
                "classes": list(document.classes),
                "grade": document.grade,
                "note": document.note,
                "category": document.category.value,
                "uploadedBy": document.uploaded_by,
            }
        )
        return self._documents.insert_one(stamp_created(doc)).inserted_id

    def update(self, document_id: ObjectId, changes: Dict[str, Any]) -> bool:
        result = self._documents.update_one({"_id": document_id}, {"$set": stamp_updated(dict(changes))})
        return result.matched_count > 0

    def delete(self, document_id: ObjectId) -> bool:
        return self._documents.delete_one({"_id": document_id}).deleted_count > 0
