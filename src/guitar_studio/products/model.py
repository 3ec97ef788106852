from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Tuple

from bson import ObjectId


@dataclass(frozen=True)
class Product:
    """Sản phẩm trong cửa hàng. `number` là mã số hiển thị (trường `id` trong JSON)."""

    id: ObjectId
    number: int
    name: str
    category: str = ""
    subcategory: str = ""
    brand: str = ""
    price: float = 0
    original_price: Optional[float] = None
    image: str = ""
    images: Tuple[str, ...] = ()
    rating: float = 0
    reviews: int = 0
    in_stock: bool = True
    is_new: bool = False
    description: str = ""
    specifications: Optional[Dict[str, str]] = None
    features: Optional[Tuple[str, ...]] = None
    accessories: Optional[Tuple[Dict[str, str], ...]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
