"""
services/category_service.py
-----------------------------
Category registry: typed income/expense labels owned per user.
"""

from models.category import CATEGORY_TYPES, Category
from models.user import Identity
from repositories.category_repo import CategoryRepository
from services.errors import (
    DuplicateCategory,
    Forbidden,
    NotFound,
    ValidationFailed,
    ok,
    operation,
)
from utils.logger import get_logger

logger = get_logger(__name__)

MAX_NAME_LENGTH = 50


def _validate(type: str, name: str) -> str:
    if type not in CATEGORY_TYPES:
        raise ValidationFailed(f"Category type must be one of: {', '.join(CATEGORY_TYPES)}")
    name = (name or "").strip()
    if not name:
        raise ValidationFailed("Category name is required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationFailed(f"Category name cannot exceed {MAX_NAME_LENGTH} characters")
    return name


class CategoryService:
    """CRUD over categories with (user, type, name) uniqueness."""

    def __init__(self, repo: CategoryRepository | None = None):
        self.repo = repo or CategoryRepository()

    def load(self, identity: Identity, category_id: int) -> Category:
        """Fetch a category the caller may access, or raise."""
        category = self.repo.get_by_id(category_id)
        if category is None:
            raise NotFound(f"Category #{category_id} not found")
        if not identity.can_access(category.user_id):
            raise Forbidden("Not authorized to use this category")
        return category

    @operation
    def create(self, identity: Identity, type: str, name: str) -> dict:
        name = _validate(type, name)
        if self.repo.find(identity.user_id, type, name):
            raise DuplicateCategory(f"You already have a {type} category named '{name}'")

        category = self.repo.add(Category(user_id=identity.user_id, type=type, name=name))
        if category is None:
            raise DuplicateCategory(f"You already have a {type} category named '{name}'")
        return ok(category)

    @operation
    def list_categories(self, identity: Identity, type: str | None = None) -> dict:
        if type and type not in CATEGORY_TYPES:
            raise ValidationFailed(f"Category type must be one of: {', '.join(CATEGORY_TYPES)}")
        return ok(self.repo.get_all(identity.user_id, type))

    @operation
    def get(self, identity: Identity, category_id: int) -> dict:
        return ok(self.load(identity, category_id))

    @operation
    def update(self, identity: Identity, category_id: int,
               type: str | None = None, name: str | None = None) -> dict:
        category = self.load(identity, category_id)
        new_type = type or category.type
        new_name = _validate(new_type, name if name is not None else category.name)
        if new_type != category.type and self.repo.is_referenced(category.id):
            raise ValidationFailed(
                f"Category '{category.name}' is used by entries or budgets, its type cannot change"
            )

        existing = self.repo.find(category.user_id, new_type, new_name)
        if existing and existing.id != category.id:
            raise DuplicateCategory(f"You already have a {new_type} category named '{new_name}'")

        category.type, category.name = new_type, new_name
        updated = self.repo.update(category)
        if updated is None:
            raise DuplicateCategory(f"You already have a {new_type} category named '{new_name}'")
        if not updated:
            raise NotFound(f"Category #{category_id} not found")
        return ok(category)

    @operation
    def delete(self, identity: Identity, category_id: int) -> dict:
        category = self.load(identity, category_id)
        if self.repo.is_referenced(category.id):
            raise ValidationFailed(
                f"Category '{category.name}' is still used by entries or budgets"
            )
        if not self.repo.delete(category.id):
            raise NotFound(f"Category #{category_id} not found")
        return ok(message=f"Category '{category.name}' deleted")
