# provide dataclass models

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Optional

from storage.errors import UnknownOrderStatusError

ADMIN_ROLE = "admin"
CLIENT_ROLE = "client"


class OrderStatus(str, Enum):
    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @classmethod
    def recognize(cls, text: Optional[str]) -> "OrderStatus":
        """Map free text ("in progress", "Delivered", ...) onto a status.

        Case and surrounding whitespace are ignored, inner spaces and dashes
        are read as underscores. Anything else raises UnknownOrderStatusError.
        """
        if isinstance(text, cls):
            return text
        key = (text or "").strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls[key]
        except KeyError:
            raise UnknownOrderStatusError(
                "recognize order status", f"unknown order status {text!r}"
            ) from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Product:
    id: Optional[int]
    name: str
    category_id: int
    manufacturer: str
    price: float
    creation_date: date
    colour: Optional[str]
    size: str
    amount: int  # in storage, or ordered quantity for an order line item


@dataclass(frozen=True)
class Manufacturer:
    name: str


@dataclass(frozen=True)
class Account:
    login: str
    password: str = field(default="", compare=False, repr=False)
    is_active: bool = True


@dataclass(frozen=True)
class Order:
    id: Optional[int]
    login: str
    products: Dict[int, Product]  # product id -> snapshot taken at order time
    status: OrderStatus = OrderStatus.NEW
    total_price: float = 0.0

    @classmethod
    def create(
        cls,
        login: str,
        products: Dict[int, Product],
        status: OrderStatus = OrderStatus.NEW,
    ) -> "Order":
        """Build an unsaved order, totalling price * amount over its lines."""
        total = sum(p.price * p.amount for p in products.values())
        return cls(
            id=None,
            login=login,
            products=dict(products),
            status=status,
            total_price=round(total, 2),
        )
