from typing import Dict, Literal, Optional, Tuple, override

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Select

from storage.models import ADMIN_ROLE, CLIENT_ROLE, Account
from utils.messages import QuitRequestedMessage


class DialogModal(ModalScreen[bool]):
    """
    A simple yes/no dialog box.
    """

    VARIANT_MAP: Dict[
        str, Tuple[Literal["primary", "default", "success", "warning", "error"], ...]
    ] = {
        "default": ("primary", "default"),
        "positive": ("success", "default"),
        "warning": ("warning", "default"),
        "error": ("error", "primary"),
    }

    def __init__(
        self,
        caption: str,
        primary_text: str = "OK",
        secondary_text: str = "",
        tone: Literal["default", "positive", "warning", "error"] = "default",
    ):
        super().__init__()
        self.caption = caption
        self.primary_text = primary_text
        self.secondary_text = secondary_text
        self.tone = tone

    def compose(self) -> ComposeResult:
        with Container(id="div-dialog"):
            yield Label(self.caption, id="caption")
            with Horizontal(id="dialog"):
                if self.secondary_text:
                    yield Button(
                        self.secondary_text,
                        variant=DialogModal.VARIANT_MAP[self.tone][1],
                        id="btn-secondary",
                    )
                yield Button(
                    self.primary_text,
                    variant=DialogModal.VARIANT_MAP[self.tone][0],
                    id="btn-primary",
                )

    def on_mount(self):
        if not self.secondary_text or not self.tone == "error":
            self.query_one("#btn-primary").focus()
        else:
            self.query_one("#btn-secondary").focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-primary":
            self.dismiss(True)
        if event.button.id == "btn-secondary":
            self.dismiss(False)


class QuitDialogModal(DialogModal):
    def __init__(self):
        super().__init__("Are you sure you want to quit?", "Yes", "No", "error")

    @override
    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-primary":
            self.post_message(QuitRequestedMessage())
            self.dismiss(True)
        else:
            self.dismiss(False)


class AccountFormModal(ModalScreen[Optional[Tuple[str, Account]]]):
    """
    Collects login, password and role for a new account.
    Dismisses with (role, Account) or None when cancelled.
    """

    def compose(self) -> ComposeResult:
        with Container(id="div-dialog"):
            yield Label("New account", id="caption")
            yield Input(placeholder="login", id="input-acc-login")
            yield Input(placeholder="password", password=True, id="input-acc-pwd")
            yield Select(
                [("Client", CLIENT_ROLE), ("Administrator", ADMIN_ROLE)],
                value=CLIENT_ROLE,
                allow_blank=False,
                id="select-acc-role",
            )
            with Horizontal(id="dialog"):
                yield Button("Cancel", id="btn-secondary")
                yield Button("Create", variant="success", id="btn-primary")

    def on_mount(self):
        self.query_one("#input-acc-login").focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-secondary":
            self.dismiss(None)
            return

        login = self.query_one("#input-acc-login", Input).value.strip()
        pwd = self.query_one("#input-acc-pwd", Input).value.strip()
        if not login or not pwd:
            self.notify("Login and password cannot be empty!", severity="error")
            return
        role = self.query_one("#select-acc-role", Select).value
        self.dismiss((str(role), Account(login=login, password=pwd, is_active=True)))
