"""Category model."""

from pydantic import BaseModel


class Category(BaseModel):
    """An approved business sector."""
    id: str
    name: str
