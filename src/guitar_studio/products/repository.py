from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence

from bson import ObjectId

from .model import Product


class ProductRepository(Protocol):
    def list_all(self) -> Sequence[Product]:
        raise NotImplementedError

    def get_by_number(self, number: int) -> Optional[Product]:
        raise NotImplementedError

    def get_by_id(self, product_id: ObjectId) -> Optional[Product]:
        raise NotImplementedError

    def max_number(self) -> int:
        """Highest numeric id in use, 0 when empty."""

        raise NotImplementedError

    def create(self, number: int, fields: Dict[str, Any]) -> ObjectId:
        """fields uses stored (camelCase) names."""

        raise NotImplementedError

    def update(self, product_id: ObjectId, changes: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, product_id: ObjectId) -> bool:
        raise NotImplementedError
