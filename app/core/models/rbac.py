from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field
from pymongo import ASCENDING, IndexModel

from app.core.models.base import AppDocument
from app.shared.timezone import get_plant_now


class Permission(AppDocument):
    """A (resource, action) pair, e.g. production:approve."""

    name: str
    description: str
    resource: str
    action: str

    @property
    def key(self) -> str:
        return f"{self.resource}:{self.action}"

    class Settings:
        name = "permissions"
        indexes = [
            IndexModel([("name", ASCENDING)], unique=True),
            IndexModel([("resource", ASCENDING), ("action", ASCENDING)], unique=True),
        ]


class Role(AppDocument):
    name: str
    description: str
    permissions: List[str] = Field(default_factory=list)  # Permission ids
    # System roles cannot be updated, deleted or unassigned
    is_system: bool = False

    class Settings:
        name = "roles"
        indexes = [
            IndexModel([("name", ASCENDING)], unique=True),
        ]


class User(AppDocument):
    name: str
    email: EmailStr
    phone: Optional[str] = None
    employee_id: str
    department: str
    designation: str
    roles: List[str] = Field(default_factory=list)  # Role ids
    is_active: bool = True
    join_date: datetime = Field(default_factory=get_plant_now)
    last_login: Optional[datetime] = None

    class Settings:
        name = "users"
        indexes = [
            IndexModel([("email", ASCENDING)], unique=True),
            [("roles", ASCENDING)],
        ]
