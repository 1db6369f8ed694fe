import os
import sys
import unittest
from datetime import date

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from storage.errors import StorageError, UnknownOrderStatusError  # noqa: E402
from storage.models import Account, Order, OrderStatus, Product  # noqa: E402


class OrderStatusTestCase(unittest.TestCase):
    def test_recognize_accepts_loose_spelling(self):
        self.assertIs(OrderStatus.recognize("NEW"), OrderStatus.NEW)
        self.assertIs(OrderStatus.recognize(" delivered "), OrderStatus.DELIVERED)
        self.assertIs(OrderStatus.recognize("In Progress"), OrderStatus.IN_PROGRESS)
        self.assertIs(OrderStatus.recognize("in-progress"), OrderStatus.IN_PROGRESS)
        self.assertIs(OrderStatus.recognize(OrderStatus.CANCELLED), OrderStatus.CANCELLED)

    def test_recognize_rejects_unknown_text(self):
        for text in ("", None, "SHIPPED", "NEWISH"):
            with self.subTest(text=text):
                with self.assertRaises(UnknownOrderStatusError) as ctx:
                    OrderStatus.recognize(text)
                self.assertIsInstance(ctx.exception, ValueError)
                self.assertIsInstance(ctx.exception, StorageError)

    def test_str_is_the_stored_text(self):
        self.assertEqual(str(OrderStatus.IN_PROGRESS), "IN_PROGRESS")


class ModelsTestCase(unittest.TestCase):
    def test_order_create_totals_line_items(self):
        lines = {
            1: Product(1, "Anvil", 1, "Acme", 49.90, date(2017, 11, 1), "black", "L", 2),
            2: Product(2, "Skates", 2, "Acme", 15.00, date(2017, 11, 5), None, "M", 1),
        }
        order = Order.create("client", lines)
        self.assertIsNone(order.id)
        self.assertEqual(order.status, OrderStatus.NEW)
        self.assertEqual(order.total_price, 114.80)
        self.assertEqual(order.products, lines)
        self.assertIsNot(order.products, lines)

    def test_account_equality_and_repr_ignore_password(self):
        self.assertEqual(Account("admin", "one"), Account("admin", "two"))
        self.assertNotEqual(Account("admin", "x", True), Account("admin", "x", False))
        self.assertNotIn("secret", repr(Account("admin", "secret")))


if __name__ == "__main__":
    unittest.main()
