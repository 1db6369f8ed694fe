from typing import Optional

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from storage.contract import Storage
from storage.database import ConnectionProvider
from storage.errors import StorageError
from storage.relational import SqliteStorage
from utils.logger import get_logger
from utils.messages import ModeSwitchedMessage, QuitRequestedMessage, UserLogoutMessage
from utils.state import GlobalState
from views.scr_accounts import AccountsScreen
from views.scr_login import LoginScreen
from views.scr_orders import OrdersScreen
from views.scr_products import ProductsScreen

_logger = get_logger(__name__)


class WebShopAdminApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "accounts": AccountsScreen,
        "orders": OrdersScreen,
        "products": ProductsScreen,
    }

    ADMIN_MODES = {
        "accounts": "Accounts",
        "orders": "Orders",
        "products": "Products",
    }

    CSS_PATH = "views/console.tcss"

    state: GlobalState
    storage: Storage

    def __init__(self, storage: Optional[Storage] = None):
        super().__init__()
        self.state = GlobalState()
        self.storage = storage or SqliteStorage(ConnectionProvider())

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        try:
            await self.storage.open()
        except StorageError as e:
            _logger.error(f"Cannot open storage: {e}")
            self.exit(message=str(e))
            return
        self.main_flow()

    async def on_unmount(self) -> None:
        await self.storage.close()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(UserLogoutMessage)
    def handle_user_logout(self):
        self.state.sign_out()
        self.notify("Logout successful.")
        self.main_flow()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.exit()

    @work
    async def main_flow(self):
        await self.push_screen_wait(LoginScreen())
        self.app.post_message(ModeSwitchedMessage(self.app.current_mode, "accounts"))
        await self.switch_mode("accounts")


def run() -> None:
    WebShopAdminApp().run()


if __name__ == "__main__":
    run()
