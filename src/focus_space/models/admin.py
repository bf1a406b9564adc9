"""Back-office administrator model."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

import bcrypt


class AdminRole(str, Enum):
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=12)).decode("utf-8")


@dataclass
class Admin:
    """An account allowed into the back office."""

    email: str
    name: str
    password_hash: str
    role: AdminRole = AdminRole.ADMIN
    id: int | None = None
    created_at: datetime | None = None

    def check_password(self, password: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), self.password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            return False

    def session_user(self) -> dict:
        """Data kept in the signed session cookie."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
        }
