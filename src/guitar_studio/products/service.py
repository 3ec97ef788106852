from __future__ import annotations

from typing import Any, Dict, Sequence

from bson import ObjectId

from ..common.serialization import dump
from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from .model import Product
from .repository import ProductRepository

# Accepted JSON fields (stored under the same names)
PRODUCT_FIELDS = (
    "name",
    "category",
    "subcategory",
    "brand",
    "price",
    "originalPrice",
    "image",
    "images",
    "rating",
    "reviews",
    "inStock",
    "isNew",
    "description",
    "specifications",
    "features",
    "accessories",
)


def product_view(product: Product) -> dict:
    data = dump(product)
    data["id"] = data.pop("number")
    return data


def _fields(data: Dict[str, Any]) -> Dict[str, Any]:
    fields = {k: data[k] for k in PRODUCT_FIELDS if k in data}
    for key in ("price", "originalPrice", "rating"):
        value = fields.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise ValidationError(f"{key} phải là số")
    return fields


class ProductService:
    def __init__(self, products: ProductRepository):
        self._products = products

    def list_products(self) -> Sequence[Product]:
        return self._products.list_all()

    def get_product(self, ref: str) -> Product:
        """Tìm theo mã số `id`, nếu không có thì thử theo ObjectId."""

        ref = str(ref)
        product = self._products.get_by_number(int(ref)) if ref.isdigit() else None
        if product is None and ObjectId.is_valid(ref):
            product = self._products.get_by_id(ObjectId(ref))
        if product is None:
            raise NotFoundError("Product not found")
        return product

    def create_product(self, data: Dict[str, Any]) -> Product:
        fields = _fields(data)
        fields["name"] = require_non_empty(fields.get("name"), "Tên sản phẩm")
        number = self._products.max_number() + 1
        product_id = self._products.create(number, fields)
        product = self._products.get_by_id(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def update_product(self, ref: str, data: Dict[str, Any]) -> Product:
        product = self.get_product(ref)
        if not self._products.update(product.id, _fields(data)):
            raise NotFoundError("Product not found")
        return self._products.get_by_id(product.id)

    def delete_product(self, ref: str) -> None:
        product = self.get_product(ref)
        if not self._products.delete(product.id):
            raise NotFoundError("Product not found")
