from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime, timezone


class Tag(Document):
    name: Indexed(str, unique=True)
    slug: Indexed(str, unique=True)

    # Timestamps
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "tags"
