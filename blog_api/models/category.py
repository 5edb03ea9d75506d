from beanie import Document, Indexed
from pydantic import Field
from typing import Optional
from datetime import datetime, timezone


class Category(Document):
    name: Indexed(str, unique=True)
    slug: Indexed(str, unique=True)
    description: Optional[str] = None

    # Timestamps
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "categories"
