from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Protocol, Sequence

from bson import ObjectId

from .model import NewDocument, StudyDocument


class DocumentRepository(Protocol):
    def list_all(self) -> Sequence[StudyDocument]:
        """Newest first."""

        raise NotImplementedError

    def list_for_classes(self, class_ids: Iterable[ObjectId]) -> Sequence[StudyDocument]:
        raise NotImplementedError

    def get_by_id(self, document_id: ObjectId) -> Optional[StudyDocument]:
        raise NotImplementedError

    def get_by_file_path(self, file_path: str) -> Optional[StudyDocument]:
        raise NotImplementedError

    def create(self, document: NewDocument) -> ObjectId:
        raise NotImplementedError

    def update(self, document_id: ObjectId, changes: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, document_id: ObjectId) -> bool:
        raise NotImplementedError
