import logging
from typing import List
from sqlmodel import Session

from app.models.category import Category
from app.repositories.base import unit_of_work
from app.repositories.categories import CategoryRepository
from app.services.errors import NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("Electronics", "Phones, laptops, chargers and headphones", "laptop"),
    ("Clothing", "Jackets, hats, scarves and other apparel", "shirt"),
    ("Bags", "Backpacks, handbags and pouches", "backpack"),
    ("Keys & Wallets", "Keys, wallets, ID holders and cards", "key"),
    ("Documents", "ID cards, notebooks and paperwork", "file-text"),
    ("Others", "Anything that does not fit elsewhere", "package"),
]


class CategoryCatalog:
    def __init__(self, session: Session):
        self.session = session
        self.categories = CategoryRepository(session)

    def list(self) -> List[Category]:
        return self.categories.all_by_name()

    def exists(self, name: str) -> bool:
        return self.categories.get_by_name(name) is not None

    def require(self, name: str) -> Category:
        category = self.categories.get_by_name(name)

        if not category:
            raise NotFoundError(f"Category '{name}' not found")

        return category

    def seed_defaults(self) -> int:
        added = 0

        with unit_of_work(self.session):
            for name, description, icon in DEFAULT_CATEGORIES:
                if self.exists(name):
                    continue

                self.categories.insert(Category(name=name, description=description, icon=icon))
                added += 1

        return added
