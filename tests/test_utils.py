import os
import sys
import tempfile
import unittest
from datetime import date

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from storage.database import ConnectionProvider  # noqa: E402
from storage.models import Order, OrderStatus, Product  # noqa: E402
from storage.relational import SqliteStorage  # noqa: E402
from utils.pure import (  # noqa: E402
    PRODUCT_HEADERS,
    generate_markdown_table,
    order_markdown,
    product_cells,
)
from utils.state import GlobalState  # noqa: E402


class PureTestCase(unittest.TestCase):
    def test_generate_markdown_table(self):
        md = generate_markdown_table(["A", "B"], [[1, "x"]], ["l", "r"])
        self.assertEqual(md, "| A | B |\n| :--- | ---: |\n| 1 | x |")
        self.assertEqual(generate_markdown_table(None, []), "")
        with self.assertRaises(ValueError):
            generate_markdown_table(["A"], [["1"]], ["l", "r"])

    def test_product_cells_match_headers(self):
        product = Product(3, "Seeds", 3, "Acme", 3.5, date(2017, 11, 7), None, "S", 100)
        cells = product_cells(product)
        self.assertEqual(len(cells), len(PRODUCT_HEADERS))
        self.assertEqual(cells[3], "3.50")
        self.assertEqual(cells[4], "-")

    def test_order_markdown(self):
        self.assertIn("Select an order", order_markdown(None))

        line = Product(1, "Anvil", 1, "Acme", 49.90, date(2017, 11, 1), "black", "L", 2)
        order = Order(7, "client", {1: line}, OrderStatus.DELIVERED, 99.80)
        md = order_markdown(order)
        self.assertIn("### Order #7", md)
        self.assertIn("Status: DELIVERED", md)
        self.assertIn("| Anvil | Acme | 2 | 49.90 | 99.80 |", md)

        empty = Order(8, "client", {}, OrderStatus.NEW, 0.0)
        self.assertIn("_No line items._", order_markdown(empty))


class GlobalStateTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        db_path = os.path.join(self.temp_dir.name, "test.sqlite")
        self.storage = SqliteStorage(ConnectionProvider(db_path, seed=True))

    async def asyncSetUp(self):
        await self.storage.open()

    async def asyncTearDown(self):
        await self.storage.close()

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_only_active_admins_sign_in(self):
        state = GlobalState()
        self.assertFalse(await state.sign_in(self.storage, "admin", "wrong"))
        self.assertFalse(await state.sign_in(self.storage, "client", "client"))
        self.assertFalse(state.signed_in)

        self.assertTrue(await state.sign_in(self.storage, "admin", "admin"))
        self.assertEqual((state.login, state.role), ("admin", "admin"))

        state.sign_out()
        self.assertFalse(state.signed_in)
        self.assertIsNone(state.role)

    async def test_blocked_admin_cannot_sign_in(self):
        await self.storage.set_account_active("admin", False)
        self.assertFalse(await GlobalState().sign_in(self.storage, "admin", "admin"))


if __name__ == "__main__":
    unittest.main()
