"""Shared fixtures: services wired to in-memory repositories."""

from decimal import Decimal

import pytest

from models.account import Account
from models.category import Category
from models.user import Identity
from services.account_store import AccountStore
from services.budget_service import BudgetService
from services.ledger_service import LedgerService
from services.transfer_service import TransferService
from tests.fakes import (
    FakeAccountRepository,
    FakeBudgetRepository,
    FakeCategoryRepository,
    FakeEntryRepository,
    FakeTransferRepository,
    FakeUserRepository,
)

OWNER = 1001
STRANGER = 2002


@pytest.fixture
def owner():
    return Identity(user_id=OWNER)


@pytest.fixture
def stranger():
    return Identity(user_id=STRANGER)


@pytest.fixture
def users():
    repo = FakeUserRepository()
    repo.ensure_user(OWNER, "Owner")
    return repo


@pytest.fixture
def accounts(users, transfers):
    return FakeAccountRepository(users, transfers)


@pytest.fixture
def categories():
    return FakeCategoryRepository()


@pytest.fixture
def entries():
    return FakeEntryRepository()


@pytest.fixture
def budgets():
    return FakeBudgetRepository()


@pytest.fixture
def transfers():
    return FakeTransferRepository()


@pytest.fixture
def store(accounts):
    return AccountStore(accounts)


@pytest.fixture
def budget_service(budgets, categories, entries):
    return BudgetService(budget_repo=budgets, category_repo=categories, entry_repo=entries)


@pytest.fixture
def ledger(entries, categories, accounts, store, budget_service):
    return LedgerService(
        entry_repo=entries,
        category_repo=categories,
        account_repo=accounts,
        store=store,
        budgets=budget_service,
    )


@pytest.fixture
def transfer_service(transfers, accounts, store):
    return TransferService(repo=transfers, account_repo=accounts, store=store)


@pytest.fixture
def make_account(accounts):
    def _make(amount="0", user_id=OWNER, name="Wallet", currency="EUR"):
        return accounts.add(Account(
            user_id=user_id,
            group="cash",
            name=name,
            amount=Decimal(amount),
            base_currency=currency,
        ))
    return _make


@pytest.fixture
def make_category(categories):
    def _make(type="expense", name="Food", user_id=OWNER):
        return categories.add(Category(user_id=user_id, type=type, name=name))
    return _make
