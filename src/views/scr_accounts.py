import asyncio

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable

from storage.errors import StorageError
from utils.messages import AccountsChangedMessage, ModeSwitchedMessage
from views.base_screen import BaseScreen
from views.modal_dialog import AccountFormModal


class AccountsScreen(BaseScreen):
    """
    Lists every account with its role and lets the admin block/unblock
    accounts or create new ones.
    """

    BINDINGS = [
        Binding("t", "toggle_status", "Block / Unblock", show=True),
        Binding("n", "new_account", "New Account", show=True),
    ]

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-accounts")
            with Horizontal(id="hort-table-control"):
                yield Button("Refresh", id="btn-refresh")
                yield Button("Block / Unblock", id="btn-toggle", variant="warning")
                yield Button("New account", id="btn-new", variant="success")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Login", "Role", "Active")
        self._load_accounts()

    @on(Button.Pressed, "#btn-refresh")
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @on(AccountsChangedMessage)
    def handle_refresh(self) -> None:
        self._load_accounts()

    @work(exclusive=True, group="accounts")
    async def _load_accounts(self) -> None:
        try:
            accounts = await self.storage.get_accounts()
            roles = await asyncio.gather(
                *(self.storage.check_account_role(login) for login in accounts)
            )
        except StorageError as e:
            self.notify(str(e), severity="error")
            return

        table = self.query_one(DataTable)
        cursor_row = table.cursor_row
        table.clear()
        for account, role in zip(accounts.values(), roles):
            table.add_row(
                account.login,
                role or "-",
                "yes" if account.is_active else "no",
                key=account.login,
            )
        if table.row_count:
            table.move_cursor(row=min(cursor_row, table.row_count - 1))

    @on(Button.Pressed, "#btn-toggle")
    def handle_toggle(self) -> None:
        self.action_toggle_status()

    @on(Button.Pressed, "#btn-new")
    def handle_new(self) -> None:
        self.action_new_account()

    @work(exclusive=True)
    async def action_toggle_status(self) -> None:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return
        login, _, active = table.get_row_at(table.cursor_row)
        if login == self.app.state.login:
            self.notify("You cannot block your own account.", severity="warning")
            return
        try:
            # the displayed flag is passed in, the storage stores its negation
            await self.storage.change_account_status(login, active == "yes")
        except StorageError as e:
            self.notify(str(e), severity="error")
            return
        self.notify(f"Account {login} {'blocked' if active == 'yes' else 'unblocked'}.")
        self.post_message(AccountsChangedMessage())

    @work(exclusive=True)
    async def action_new_account(self) -> None:
        result = await self.app.push_screen_wait(AccountFormModal())
        if not result:
            return
        role, account = result
        try:
            await self.storage.add_account(role, account)
        except StorageError as e:
            self.notify(str(e), severity="error")
            return
        self.notify(f"Account {account.login} created.")
        self.post_message(AccountsChangedMessage())
