# the persistence contract the console (and any other front end) relies on

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, List, Optional, Union

from storage.models import Account, Manufacturer, Order, Product

PriceFilter = Union[str, float, int, None]


class Storage(ABC):
    """
    Every datastore backing the web shop implements this contract.

    Not-found outcomes are ordinary return values (None, "", False, empty
    dict); everything else that goes wrong raises a StorageError subclass.
    """

    async def __aenter__(self) -> "Storage":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def open(self) -> None:
        """Acquire whatever resources the storage needs. No-op by default."""

    @abstractmethod
    async def close(self) -> None: ...

    # ---------------------------
    # Products
    # ---------------------------

    @abstractmethod
    async def get_products(self) -> Dict[int, Product]: ...

    @abstractmethod
    async def add_product(self, product: Product) -> int:
        """Insert product (its id is ignored) and return the new id."""

    @abstractmethod
    async def get_product_by_id(self, product_id: int) -> Optional[Product]: ...

    @abstractmethod
    async def edit_product(
        self,
        product_id: int,
        name: str,
        category_id: int,
        manufacturer: str,
        price: float,
        creation_date: date,
        colour: Optional[str],
        size: str,
        amount: int,
    ) -> None:
        """Replace every column of the product row."""

    @abstractmethod
    async def delete_product(self, product_id: int) -> None: ...

    @abstractmethod
    async def get_product_by_product_name(self, name: str) -> Optional[Product]:
        """Case-insensitive exact name match; the highest id wins."""

    @abstractmethod
    async def find_products(
        self,
        manufacturer_name: Optional[str],
        min_price: PriceFilter,
        max_price: PriceFilter,
        colour: Optional[str],
    ) -> Dict[int, Product]:
        """
        Filtered search. Blank filters mean "any"; products without a
        colour always match the colour filter.
        """

    @abstractmethod
    async def get_manufacturers(self) -> Dict[str, Manufacturer]: ...

    # ---------------------------
    # Accounts & Roles
    # ---------------------------

    @abstractmethod
    async def get_accounts(self) -> Dict[str, Account]: ...

    @abstractmethod
    async def add_account(self, role: str, account: Account) -> None: ...

    @abstractmethod
    async def check_account_role(self, login: str) -> str:
        """Role of the most recently stored role row, or "" if none."""

    @abstractmethod
    async def get_account_roles(self, login: str) -> List[str]: ...

    @abstractmethod
    async def check_login_password(self, login: str, password: str) -> bool: ...

    @abstractmethod
    async def set_account_active(self, login: str, active: bool) -> None: ...

    @abstractmethod
    async def toggle_account_active(self, login: str) -> None: ...

    async def change_account_status(self, login: str, current_status: bool) -> None:
        """
        Store the NEGATION of current_status.

        Callers pass the flag they currently display; the account ends up
        with the opposite one. Prefer set_account_active/toggle_account_active.
        """
        await self.set_account_active(login, not current_status)

    # ---------------------------
    # Orders
    # ---------------------------

    @abstractmethod
    async def make_order(self, order: Order) -> int:
        """Store the header and its line-item snapshots atomically."""

    @abstractmethod
    async def get_user_orders(self, login: str) -> Dict[int, Order]: ...

    @abstractmethod
    async def get_all_orders(self) -> Dict[int, Order]: ...

    @abstractmethod
    async def change_order_status(self, order_id: int, new_status: str) -> None: ...
