from datetime import datetime
from uuid import uuid4

from beanie import Document
from pydantic import Field

from app.shared.timezone import get_plant_now


def generate_id() -> str:
    return uuid4().hex


class AppDocument(Document):
    """
    Base for every stored entity.
    Uses opaque string ids instead of ObjectIds so references between
    collections (plan_id, daily_plan_id, ...) are plain strings.
    """

    id: str = Field(default_factory=generate_id)
    created_at: datetime = Field(default_factory=get_plant_now)
    updated_at: datetime = Field(default_factory=get_plant_now)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", exclude={"revision_id"})

    def touch(self) -> None:
        self.updated_at = get_plant_now()
