from typing import Optional
from sqlmodel import func, select

from app.models.category import Category
from app.repositories.base import SQLModelRepository


class CategoryRepository(SQLModelRepository[Category]):
    model = Category

    def get_by_name(self, name: str) -> Optional[Category]:
        return self.session.exec(
            select(Category).where(Category.name == name)
        ).first()

    def all_by_name(self):
        # Case-insensitive, ties broken by exact name then id
        return self.query(
            order_by=(func.lower(Category.name), Category.name, Category.id)
        )
