"""
Request schemas for the blog, category and tag endpoints
"""

from typing import List, Optional

from beanie import PydanticObjectId
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts camelCase JSON keys and snake_case attribute names"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BlogImageInput(CamelModel):
    # Optional here so a missing url/publicId can fail the whole request
    url: Optional[str] = None
    public_id: Optional[str] = None
    position: int = 0
    alt_text: str = ""
    caption: str = ""


class BlogCreateRequest(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    status: Optional[str] = None
    category: Optional[PydanticObjectId] = None
    tags: Optional[List[PydanticObjectId]] = None
    images: Optional[List[BlogImageInput]] = None
    is_featured: Optional[bool] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Hello World!",
                "content": "<p>First post</p>",
                "excerpt": "A first post",
                "status": "draft",
                "tags": [],
                "images": [
                    {
                        "url": "https://cdn.example.com/blog-images/a.jpg",
                        "publicId": "blog-images/a.jpg",
                        "position": 0,
                        "altText": "Cover",
                        "caption": "",
                    }
                ],
            }
        }
    )


class BlogUpdateRequest(BlogCreateRequest):
    pass


class CategoryCreateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=50)
    description: Optional[str] = None


class CategoryUpdateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    description: Optional[str] = None


class TagCreateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=50)


class TagUpdateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
