from beanie import Document, Indexed, PydanticObjectId
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime, timezone


class BlogImage(BaseModel):
    """Image hosted on the media storage, placed inside a blog post"""

    url: str
    public_id: str
    position: int = 0  # Position in content
    alt_text: str = ""
    caption: str = ""


class Blog(Document):
    title: str
    slug: Indexed(str, unique=True)  # URL-friendly version of title
    content: str
    excerpt: Optional[str] = None
    status: str = "draft"

    # Organization (weak references, resolved on read)
    category: Optional[PydanticObjectId] = None
    tags: List[PydanticObjectId] = []

    # Admin
    author: str

    # Stats
    views_count: int = Field(default=0, ge=0)
    likes_count: int = Field(default=0, ge=0)
    is_featured: bool = False

    # Media
    images: List[BlogImage] = []

    # Timestamps
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "blogs"

    def update_timestamp(self):
        self.updated_at = datetime.now(timezone.utc)
