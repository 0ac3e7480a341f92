from typing import Optional

from pydantic import Field

from app.models.base import ApiModel


class CategoryCreate(ApiModel):
    name: str = Field(min_length=1)
    icon: str
    color: str
    description: Optional[str] = None


class Category(CategoryCreate):
    id: int
