# src/storage/relational.py
from __future__ import annotations

import asyncio
import hmac
import sqlite3
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import AsyncIterator, Dict, Iterable, List, Optional, Sequence

import aiosqlite

from storage.contract import PriceFilter, Storage
from storage.database import ConnectionProvider
from storage.errors import (
    ConstraintViolationError,
    MissingGeneratedKeyError,
    StorageUnavailableError,
    UnknownOrderStatusError,
)
from storage.models import Account, Manufacturer, Order, OrderStatus, Product
from utils.logger import get_logger

_logger = get_logger(__name__)

MATCH_ALL = "%"
MIN_PRICE_DEFAULT = 0.0
MAX_PRICE_DEFAULT = 100_000_000.0

_PRODUCT_COLUMNS = (
    "product_id, product_name, category_id_fk, manufacturer_name_fk, price, "
    "creation_date, colour, size, amount_in_storage"
)
# same order as _PRODUCT_COLUMNS so both map through _row_to_product
_ORDER_PRODUCT_COLUMNS = (
    "product_id, product_name, category_id, manufacturer_name, price, "
    "creation_date, colour, size, ordered_amount"
)


def _to_date(val) -> date:
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    # tolerate a time part written by older rows
    return date.fromisoformat(str(val)[:10])


def _date_text(val) -> str:
    """Creation dates are stored as plain ISO dates, never with a time."""
    return _to_date(val).isoformat()


def _row_to_product(row: Sequence) -> Product:
    return Product(
        id=int(row[0]),
        name=row[1],
        category_id=int(row[2]),
        manufacturer=row[3],
        price=float(row[4]),
        creation_date=_to_date(row[5]),
        colour=row[6],
        size=row[7],
        amount=int(row[8]),
    )


def _is_blank(val) -> bool:
    return val is None or (isinstance(val, str) and not val.strip())


def _pattern(val: Optional[str]) -> str:
    return MATCH_ALL if _is_blank(val) else val


def _price_bound(val: PriceFilter, default: float) -> float:
    if _is_blank(val):
        return default
    try:
        return float(val)
    except (TypeError, ValueError):
        raise ValueError(f"Price filter must be a number, got {val!r}.") from None


class SqliteStorage(Storage):
    """
    Storage backed by a single aiosqlite connection.

    The connection comes from the injected provider in open() and goes back
    to it in close(). Reads and writes share one lock; writes run inside a
    transaction that rolls back on any error.
    """

    def __init__(self, provider: Optional[ConnectionProvider] = None):
        self._provider = provider or ConnectionProvider()
        self._conn: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

    # ---------------------------
    # Lifecycle & helpers
    # ---------------------------

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StorageUnavailableError("use storage", "storage is not open")
        return self._conn

    async def open(self) -> None:
        if self._conn is not None:
            return
        async with self._errors("open storage"):
            self._conn = await self._provider.acquire()
        _logger.info(f"Storage opened on {self._provider.db_path}.")

    async def close(self) -> None:
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        async with self._errors("close storage"):
            await self._provider.release(conn)
        _logger.info("Storage closed.")

    @asynccontextmanager
    async def _errors(self, operation: str) -> AsyncIterator[None]:
        """Re-raise driver errors as typed storage errors."""
        try:
            yield
        except sqlite3.IntegrityError as e:
            _logger.error(f"{operation}: constraint violated ({e})")
            raise ConstraintViolationError(operation, str(e)) from e
        except sqlite3.Error as e:
            _logger.error(f"{operation}: database error ({e})")
            raise StorageUnavailableError(operation, str(e)) from e

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[aiosqlite.Connection]:
        conn = self.connection
        async with self._lock:
            async with self._errors(operation):
                try:
                    yield conn
                    await conn.commit()
                except BaseException:
                    await conn.rollback()
                    _logger.debug(f"{operation}: rolled back.")
                    raise

    @asynccontextmanager
    async def _reading(self, operation: str) -> AsyncIterator[None]:
        """Reads wait for any write in flight, so they never see its uncommitted rows."""
        async with self._lock:
            async with self._errors(operation):
                yield

    async def _fetchall(self, sql: str, params: Iterable = ()) -> List[sqlite3.Row]:
        cur = await self.connection.execute(sql, tuple(params))
        try:
            return list(await cur.fetchall())
        finally:
            await cur.close()

    async def _fetchone(self, sql: str, params: Iterable = ()) -> Optional[sqlite3.Row]:
        cur = await self.connection.execute(sql, tuple(params))
        try:
            return await cur.fetchone()
        finally:
            await cur.close()

    @staticmethod
    async def _execute(conn: aiosqlite.Connection, sql: str, params: Iterable = ()) -> int:
        """Run one write statement, return the affected row count."""
        cur = await conn.execute(sql, tuple(params))
        try:
            return cur.rowcount
        finally:
            await cur.close()

    @staticmethod
    async def _insert_returning_key(
        conn: aiosqlite.Connection, operation: str, sql: str, params: Iterable
    ) -> int:
        cur = await conn.execute(sql, tuple(params))
        try:
            key = cur.lastrowid
        finally:
            await cur.close()
        if not key:
            raise MissingGeneratedKeyError(operation, "no key was generated")
        return int(key)

    # ---------------------------
    # Products
    # ---------------------------

    async def get_products(self) -> Dict[int, Product]:
        async with self._reading("get products"):
            rows = await self._fetchall(
                f"SELECT {_PRODUCT_COLUMNS} FROM products ORDER BY product_id;"
            )
        return {p.id: p for p in map(_row_to_product, rows)}

    async def add_product(self, product: Product) -> int:
        async with self._transaction("add product") as conn:
            product_id = await self._insert_returning_key(
                conn,
                "add product",
                """
                INSERT INTO products (product_name, category_id_fk, manufacturer_name_fk,
                                      price, creation_date, colour, size, amount_in_storage)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    product.name,
                    product.category_id,
                    product.manufacturer,
                    product.price,
                    _date_text(product.creation_date),
                    product.colour,
                    product.size,
                    product.amount,
                ),
            )
        _logger.info(f"Product {product_id} ({product.name}) added.")
        return product_id

    async def get_product_by_id(self, product_id: int) -> Optional[Product]:
        async with self._reading("get product"):
            row = await self._fetchone(
                f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE product_id = ?;",
                (product_id,),
            )
        return _row_to_product(row) if row else None

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
        async with self._transaction("edit product") as conn:
            changed = await self._execute(
                conn,
                """
                UPDATE products
                SET product_name = ?,
                    category_id_fk = ?,
                    manufacturer_name_fk = ?,
                    price = ?,
                    creation_date = ?,
                    colour = ?,
                    size = ?,
                    amount_in_storage = ?
                WHERE product_id = ?;
                """,
                (
                    name,
                    category_id,
                    manufacturer,
                    price,
                    _date_text(creation_date),
                    colour,
                    size,
                    amount,
                    product_id,
                ),
            )
        if changed:
            _logger.info(f"Product {product_id} edited.")
        else:
            _logger.debug(f"Edit skipped, product {product_id} does not exist.")

    async def delete_product(self, product_id: int) -> None:
        async with self._transaction("delete product") as conn:
            deleted = await self._execute(
                conn, "DELETE FROM products WHERE product_id = ?;", (product_id,)
            )
        if deleted:
            _logger.info(f"Product {product_id} deleted.")

    async def get_product_by_product_name(self, name: str) -> Optional[Product]:
        # casefold in Python: sqlite's LOWER() only folds ASCII
        wanted = (name or "").casefold()
        found: Optional[Product] = None
        for product in (await self.get_products()).values():
            if product.name.casefold() == wanted:
                found = product
        return found

    async def find_products(
        self,
        manufacturer_name: Optional[str],
        min_price: PriceFilter,
        max_price: PriceFilter,
        colour: Optional[str],
    ) -> Dict[int, Product]:
        params = (
            _pattern(manufacturer_name),
            _price_bound(min_price, MIN_PRICE_DEFAULT),
            _price_bound(max_price, MAX_PRICE_DEFAULT),
            _pattern(colour),
        )
        async with self._reading("find products"):
            rows = await self._fetchall(
                f"""
                SELECT {_PRODUCT_COLUMNS}
                FROM products
                WHERE manufacturer_name_fk LIKE ?
                  AND price >= ?
                  AND price <= ?
                  AND (colour LIKE ? OR colour IS NULL)
                ORDER BY product_id;
                """,
                params,
            )
        return {p.id: p for p in map(_row_to_product, rows)}

    async def get_manufacturers(self) -> Dict[str, Manufacturer]:
        async with self._reading("get manufacturers"):
            rows = await self._fetchall(
                "SELECT manufacturer_name FROM manufacturers ORDER BY manufacturer_name;"
            )
        return {row[0]: Manufacturer(name=row[0]) for row in rows}

    # ---------------------------
    # Accounts & Roles
    # ---------------------------

    async def get_accounts(self) -> Dict[str, Account]:
        async with self._reading("get accounts"):
            rows = await self._fetchall(
                "SELECT account_name, is_active FROM accounts ORDER BY account_name;"
            )
        return {
            row[0]: Account(login=row[0], is_active=bool(row[1])) for row in rows
        }

    async def add_account(self, role: str, account: Account) -> None:
        async with self._transaction("add account") as conn:
            await self._execute(
                conn,
                "INSERT INTO accounts (account_name, account_pass, is_active) VALUES (?, ?, ?);",
                (account.login, account.password, int(account.is_active)),
            )
            await self._execute(
                conn,
                "INSERT INTO account_roles (account_name_fk, role_name) VALUES (?, ?);",
                (account.login, role),
            )
        _logger.info(f"Account {account.login} added with role {role}.")

    async def check_account_role(self, login: str) -> str:
        async with self._reading("check account role"):
            row = await self._fetchone(
                """
                SELECT role_name
                FROM account_roles
                WHERE account_name_fk = ?
                ORDER BY rowid DESC
                LIMIT 1;
                """,
                (login,),
            )
        return row[0] if row else ""

    async def get_account_roles(self, login: str) -> List[str]:
        async with self._reading("get account roles"):
            rows = await self._fetchall(
                "SELECT role_name FROM account_roles WHERE account_name_fk = ? ORDER BY rowid;",
                (login,),
            )
        return [row[0] for row in rows]

    async def check_login_password(self, login: str, password: str) -> bool:
        async with self._reading("check login"):
            row = await self._fetchone(
                "SELECT account_pass, is_active FROM accounts WHERE account_name = ?;",
                (login,),
            )
        if not row or password is None:
            return False
        matches = hmac.compare_digest(
            str(row[0]).encode("utf-8"), password.encode("utf-8")
        )
        return matches and bool(row[1])

    async def set_account_active(self, login: str, active: bool) -> None:
        async with self._transaction("set account status") as conn:
            await self._execute(
                conn,
                "UPDATE accounts SET is_active = ? WHERE account_name = ?;",
                (int(bool(active)), login),
            )
        _logger.info(f"Account {login} {'activated' if active else 'deactivated'}.")

    async def toggle_account_active(self, login: str) -> None:
        async with self._transaction("toggle account status") as conn:
            await self._execute(
                conn,
                "UPDATE accounts SET is_active = 1 - is_active WHERE account_name = ?;",
                (login,),
            )
        _logger.info(f"Account {login} status toggled.")

    # ---------------------------
    # Orders
    # ---------------------------

    async def make_order(self, order: Order) -> int:
        status = OrderStatus.recognize(order.status)
        async with self._transaction("make order") as conn:
            order_id = await self._insert_returning_key(
                conn,
                "make order",
                "INSERT INTO orders (account_name_fk, status, total_price) VALUES (?, ?, ?);",
                (order.login, status.value, order.total_price),
            )
            lines = [
                (
                    order_id,
                    p.id if p.id is not None else product_id,
                    p.name,
                    p.category_id,
                    p.manufacturer,
                    p.price,
                    _date_text(p.creation_date),
                    p.colour,
                    p.size,
                    p.amount,
                )
                for product_id, p in order.products.items()
            ]
            if lines:
                cur = await conn.executemany(
                    """
                    INSERT INTO order_product (order_id, product_id, product_name, category_id,
                                               manufacturer_name, price, creation_date, colour,
                                               size, ordered_amount)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    lines,
                )
                await cur.close()
        _logger.info(f"Order {order_id} placed by {order.login} with {len(lines)} line(s).")
        return order_id

    async def _get_ordered_products(self, order_id: int) -> Dict[int, Product]:
        rows = await self._fetchall(
            f"SELECT {_ORDER_PRODUCT_COLUMNS} FROM order_product WHERE order_id = ? ORDER BY rowid;",
            (order_id,),
        )
        return {p.id: p for p in map(_row_to_product, rows)}

    async def _load_orders(
        self, operation: str, where: str = "", params: Iterable = ()
    ) -> Dict[int, Order]:
        orders: Dict[int, Order] = {}
        async with self._reading(operation):
            rows = await self._fetchall(
                f"""
                SELECT order_id, account_name_fk, status, total_price
                FROM orders
                {where}
                ORDER BY order_id;
                """,
                params,
            )
            for row in rows:
                order_id = int(row[0])
                try:
                    status = OrderStatus.recognize(row[2])
                except UnknownOrderStatusError:
                    _logger.error(f"Order {order_id} has unreadable status {row[2]!r}.")
                    raise
                orders[order_id] = Order(
                    id=order_id,
                    login=row[1],
                    products=await self._get_ordered_products(order_id),
                    status=status,
                    total_price=float(row[3]),
                )
        return orders

    async def get_user_orders(self, login: str) -> Dict[int, Order]:
        return await self._load_orders(
            "get user orders", "WHERE account_name_fk = ?", (login,)
        )

    async def get_all_orders(self) -> Dict[int, Order]:
        return await self._load_orders("get all orders")

    async def change_order_status(self, order_id: int, new_status: str) -> None:
        try:
            status = OrderStatus.recognize(new_status)
        except UnknownOrderStatusError:
            _logger.warning(f"Rejected status {new_status!r} for order {order_id}.")
            raise
        async with self._transaction("change order status") as conn:
            await self._execute(
                conn,
                "UPDATE orders SET status = ? WHERE order_id = ?;",
                (status.value, order_id),
            )
        _logger.info(f"Order {order_id} is now {status}.")
