from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from bson import ObjectId
from pymongo import DESCENDING

from ..database.connection import DatabaseConnection
from ..database.mongo_base import stamp_created, stamp_updated
from .model import Product
from .repository import ProductRepository


def _to_product(doc: dict) -> Product:
    features = doc.get("features")
    accessories = doc.get("accessories")
    return Product(
        id=doc["_id"],
        number=int(doc.get("id") or 0),
        name=doc.get("name", ""),
        category=doc.get("category", ""),
        subcategory=doc.get("subcategory", ""),
        brand=doc.get("brand", ""),
        price=doc.get("price") or 0,
        original_price=doc.get("originalPrice"),
        image=doc.get("image", ""),
        images=tuple(doc.get("images") or []),
        rating=doc.get("rating") or 0,
        reviews=int(doc.get("reviews") or 0),
        in_stock=bool(doc.get("inStock", True)),
        is_new=bool(doc.get("isNew", False)),
        description=doc.get("description", ""),
        specifications=doc.get("specifications"),
        features=tuple(features) if features is not None else None,
        accessories=tuple(accessories) if accessories is not None else None,
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


class MongoProductRepository(ProductRepository):
    def __init__(self, conn: DatabaseConnection):
        self._conn = conn

    @property
    def _products(self):
        return self._conn.db()["products"]

    def list_all(self) -> Sequence[Product]:
        return [_to_product(d) for d in self._products.find({})]

    def get_by_number(self, number: int) -> Optional[Product]:
        doc = self._products.find_one({"id": number})
        return _to_product(doc) if doc else None

    def get_by_id(self, product_id: ObjectId) -> Optional[Product]:
        doc = self._products.find_one({"_id": product_id})
        return _to_product(doc) if doc else None

    def max_number(self) -> int:
        last = self._products.find_one({"id": {"$exists": True}}, sort=[("id", DESCENDING)])
        return int(last["id"]) if last else 0

    def create(self, number: int, fields: Dict[str, Any]) -> ObjectId:
        doc = dict(fields)
        doc["id"] = number
        return self._products.insert_one(stamp_created(doc)).inserted_id

    def update(self, product_id: ObjectId, changes: Dict[str, Any]) -> bool:
        result = self._products.update_one({"_id": product_id}, {"$set": stamp_updated(dict(changes))})
        return result.matched_count > 0

    def delete(self, product_id: ObjectId) -> bool:
        return self._products.delete_one({"_id": product_id}).deleted_count > 0
