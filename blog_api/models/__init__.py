from .blog import Blog, BlogImage
from .category import Category
from .tag import Tag

# Documents registered with Beanie at startup
DOCUMENT_MODELS = [Blog, Category, Tag]

__all__ = ["Blog", "BlogImage", "Category", "Tag", "DOCUMENT_MODELS"]
