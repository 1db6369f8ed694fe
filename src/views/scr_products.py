from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Select

from storage.errors import StorageError
from utils.messages import ModeSwitchedMessage
from utils.pure import PRODUCT_HEADERS, product_cells
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal


class ProductsScreen(BaseScreen):
    """
    Product catalogue filtered by manufacturer, price range and colour.
    Blank filters match everything; products without a colour always show.
    """

    BINDINGS = [
        Binding("delete", "delete_product", "Delete Product", show=True),
    ]

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            with Horizontal(id="hort-filters"):
                yield Select([], prompt="Any manufacturer", id="select-manufacturer")
                yield Input(
                    placeholder="min price",
                    id="input-min-price",
                    type="number",
                    validators=[Number(minimum=0.0)],
                )
                yield Input(
                    placeholder="max price",
                    id="input-max-price",
                    type="number",
                    validators=[Number(minimum=0.0)],
                )
                yield Input(placeholder="colour", id="input-colour")
                yield Button("Find", id="btn-find", variant="primary")
            yield DataTable(id="table-products")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns(*PRODUCT_HEADERS)
        self._load_manufacturers()
        self.handle_find()

    @work(exclusive=True, group="manufacturers")
    async def _load_manufacturers(self) -> None:
        try:
            manufacturers = await self.storage.get_manufacturers()
        except StorageError as e:
            self.notify(str(e), severity="error")
            return
        self.query_one("#select-manufacturer", Select).set_options(
            [(name, name) for name in manufacturers]
        )

    @on(Button.Pressed, "#btn-find")
    @on(Input.Submitted)
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @work(exclusive=True, group="products")
    async def handle_find(self) -> None:
        manufacturer = self.query_one("#select-manufacturer", Select).value
        if manufacturer == Select.BLANK:
            manufacturer = None
        try:
            products = await self.storage.find_products(
                manufacturer,
                self.query_one("#input-min-price", Input).value,
                self.query_one("#input-max-price", Input).value,
                self.query_one("#input-colour", Input).value,
            )
        except ValueError as e:
            self.notify(str(e), severity="error")
            return
        except StorageError as e:
            self.notify(str(e), severity="error")
            return

        table = self.query_one(DataTable)
        table.clear()
        for product in products.values():
            table.add_row(*product_cells(product))

    @work(exclusive=True)
    async def action_delete_product(self) -> None:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return
        product_id, name, *_ = table.get_row_at(table.cursor_row)
        if not await self.app.push_screen_wait(
            DialogModal(
                f"Delete product {name}?",
                primary_text="Delete",
                secondary_text="Keep",
                tone="error",
            )
        ):
            return
        try:
            await self.storage.delete_product(int(product_id))
        except StorageError as e:
            self.notify(str(e), severity="error")
            return
        self.notify(f"Product {name} deleted.")
        self.handle_find()
