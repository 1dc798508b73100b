"""Category registry."""

import pytest

from services.category_service import CategoryService


@pytest.fixture
def service(categories):
    return CategoryService(categories)


def test_create_and_list(service, owner):
    service.create(owner, "expense", "Food")
    service.create(owner, "income", "Salary")

    names = [c.name for c in service.list_categories(owner, "expense")["data"]]

    assert names == ["Food"]


def test_duplicate_name_same_type(service, owner):
    service.create(owner, "expense", "Food")

    result = service.create(owner, "expense", "Food")

    assert result["error"] == "DuplicateCategory"


def test_same_name_other_type_allowed(service, owner):
    service.create(owner, "expense", "Gifts")

    assert service.create(owner, "income", "Gifts")["success"] is True


def test_same_name_other_user_allowed(service, owner, stranger):
    service.create(owner, "expense", "Food")

    assert service.create(stranger, "expense", "Food")["success"] is True


def test_rename_onto_existing(service, owner):
    service.create(owner, "expense", "Food")
    rent = service.create(owner, "expense", "Rent")["data"]

    result = service.update(owner, rent.id, name="Food")

    assert result["error"] == "DuplicateCategory"


@pytest.mark.parametrize("type_, name", [("expense", ""), ("savings", "Food"), ("expense", "x" * 51)])
def test_invalid_input(service, owner, type_, name):
    assert service.create(owner, type_, name)["error"] == "ValidationFailed"


def test_referenced_category_is_kept(service, owner, categories):
    food = service.create(owner, "expense", "Food")["data"]
    categories.referenced.add(food.id)

    result = service.delete(owner, food.id)

    assert result["error"] == "ValidationFailed"
    assert categories.get_by_id(food.id) is not None


def test_referenced_category_keeps_its_type(service, owner, categories):
    food = service.create(owner, "expense", "Food")["data"]
    categories.referenced.add(food.id)

    assert service.update(owner, food.id, type="income")["error"] == "ValidationFailed"
    assert service.update(owner, food.id, name="Groceries")["success"] is True


def test_delete_other_users_category(service, owner, stranger):
    food = service.create(owner, "expense", "Food")["data"]

    assert service.delete(stranger, food.id)["error"] == "Forbidden"
