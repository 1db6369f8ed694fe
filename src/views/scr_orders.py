from typing import Dict

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Label, MarkdownViewer, Select

from storage.errors import StorageError
from storage.models import Order, OrderStatus
from utils.messages import ModeSwitchedMessage, OrderStatusChangedMessage
from utils.pure import order_markdown
from views.base_screen import BaseScreen


class OrdersScreen(BaseScreen):
    """
    All orders of all customers. The detail pane shows the line-item
    snapshots; the status of the highlighted order can be changed.
    """

    def __init__(self) -> None:
        super().__init__()
        self._orders: Dict[int, Order] = {}

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            yield DataTable(id="table-orders")
            with Horizontal(id="hort-table-control"):
                yield Button("Refresh", id="btn-refresh")
                yield Label("Status:")
                yield Select(
                    [(s.value.replace("_", " ").title(), s.value) for s in OrderStatus],
                    value=OrderStatus.NEW.value,
                    allow_blank=False,
                    id="select-status",
                )
                yield Button("Apply", id="btn-apply", variant="primary")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order No", "Customer", "Status", "Items", "Total ($)")
        self._load_orders()

    @on(Button.Pressed, "#btn-refresh")
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @on(OrderStatusChangedMessage)
    def handle_refresh(self) -> None:
        self._load_orders()

    @work(exclusive=True, group="orders")
    async def _load_orders(self) -> None:
        try:
            self._orders = await self.storage.get_all_orders()
        except StorageError as e:
            self.notify(str(e), severity="error")
            return

        table = self.query_one(DataTable)
        table.clear()
        for order in self._orders.values():
            table.add_row(
                order.id,
                order.login,
                str(order.status),
                len(order.products),
                f"{order.total_price:.2f}",
            )
        if table.row_count:
            table.move_cursor(row=0)
        self._render_detail()

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self) -> None:
        self._render_detail()

    def _current_order(self) -> Order | None:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row_values = table.get_row_at(table.cursor_row)
        return self._orders.get(int(row_values[0]))

    def _render_detail(self) -> None:
        order = self._current_order()
        if order is not None:
            self.query_one("#select-status", Select).value = order.status.value
        self.query_one("#md-order-detail", MarkdownViewer).document.update(
            order_markdown(order)
        )

    @on(Button.Pressed, "#btn-apply")
    @work(exclusive=True)
    async def handle_apply(self) -> None:
        order = self._current_order()
        if order is None:
            self.notify("No order selected.", severity="warning")
            return
        new_status = str(self.query_one("#select-status", Select).value)
        if new_status == order.status.value:
            self.notify("Nothing to update.", severity="warning")
            return
        try:
            await self.storage.change_order_status(order.id, new_status)
        except StorageError as e:
            self.notify(str(e), severity="error")
            return
        self.notify(f"Order #{order.id} is now {new_status}.")
        self.post_message(OrderStatusChangedMessage(order.id, new_status))
