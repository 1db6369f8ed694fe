from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the admin logs out
    """

    bubble = True


class UserLoginMessage(Message):
    """
    Fired when the admin logged in, so the screen can refresh
    """

    bubble = True


class AccountsChangedMessage(Message):
    """
    Fired after an account is created or its active flag changes.
    Triggers a reload of the accounts table.
    """

    bubble = True


class OrderStatusChangedMessage(Message):
    """
    Fired after an order status was stored.
    """

    bubble = True

    def __init__(self, order_id: int, status: str) -> None:
        super().__init__()
        self.order_id = order_id
        self.status = status


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    must be fired from app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
