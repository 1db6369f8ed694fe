from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from storage.contract import Storage
from storage.models import ADMIN_ROLE


@dataclass
class GlobalState:
    """
    Centralized console state shared by screens.

    Fields:
      - login: account name of the signed-in user
      - role: role returned by the storage for that login
    """

    login: Optional[str] = None
    role: Optional[str] = None

    @property
    def signed_in(self) -> bool:
        return self.login is not None

    async def sign_in(self, storage: Storage, login: str, password: str) -> bool:
        """
        Check the credentials and remember the user.
        Only active accounts holding the admin role may use the console.
        """
        if not await storage.check_login_password(login, password):
            return False
        role = await storage.check_account_role(login)
        if role != ADMIN_ROLE:
            return False
        self.login = login
        self.role = role
        return True

    def sign_out(self) -> None:
        self.login = None
        self.role = None
