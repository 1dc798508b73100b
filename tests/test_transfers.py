"""Transfers between two accounts of the same user."""

from decimal import Decimal

from services.account_service import AccountService


def test_transfer_moves_both_legs(transfer_service, owner, accounts, make_account):
    """40 from A(100) to B(10) leaves A=60 and B=50."""
    a = make_account("100", name="A")
    b = make_account("10", name="B")

    result = transfer_service.create(owner, a.id, b.id, "40")

    assert result["success"] is True
    assert accounts.balance(a.id) == Decimal("60.00")
    assert accounts.balance(b.id) == Decimal("50.00")


def test_delete_reverses_both_legs(transfer_service, owner, accounts, transfers, make_account):
    a = make_account("100", name="A")
    b = make_account("10", name="B")
    transfer = transfer_service.create(owner, a.id, b.id, "40")["data"]

    result = transfer_service.delete(owner, transfer.id)

    assert result["success"] is True
    assert accounts.balance(a.id) == Decimal("100.00")
    assert accounts.balance(b.id) == Decimal("10.00")
    assert transfers.get_by_id(transfer.id) is None


def test_reversal_may_overdraw_destination(transfer_service, owner, accounts, make_account):
    """Deleting a transfer whose money was already spent still reverses it."""
    a = make_account("100", name="A")
    b = make_account("0", name="B")
    transfer = transfer_service.create(owner, a.id, b.id, "40")["data"]
    accounts.adjust(b.id, Decimal("-40"))

    assert transfer_service.delete(owner, transfer.id)["success"] is True
    assert accounts.balance(b.id) == Decimal("-40.00")


def test_insufficient_funds_changes_nothing(transfer_service, owner, accounts, transfers, make_account):
    a = make_account("100", name="A")
    b = make_account("10", name="B")

    result = transfer_service.create(owner, a.id, b.id, "200")

    assert result["error"] == "InsufficientFunds"
    assert accounts.balance(a.id) == Decimal("100")
    assert accounts.balance(b.id) == Decimal("10")
    assert transfers.table.rows == {}


def test_same_account(transfer_service, owner, make_account):
    a = make_account("100")

    result = transfer_service.create(owner, a.id, a.id, "5")

    assert result["error"] == "InvalidTransfer"


def test_funds_checked_before_same_account(transfer_service, owner, make_account):
    a = make_account("1")

    assert transfer_service.create(owner, a.id, a.id, "5")["error"] == "InsufficientFunds"


def test_foreign_destination(transfer_service, owner, stranger, make_account):
    mine = make_account("100")
    theirs = make_account("0", user_id=stranger.user_id)

    result = transfer_service.create(owner, mine.id, theirs.id, "5")

    assert result["error"] == "Forbidden"


def test_missing_account(transfer_service, owner, make_account):
    mine = make_account("100")

    assert transfer_service.create(owner, mine.id, 999, "5")["error"] == "NotFound"


def test_list_filters_by_either_leg(transfer_service, owner, make_account):
    a = make_account("100", name="A")
    b = make_account("0", name="B")
    c = make_account("0", name="C")
    transfer_service.create(owner, a.id, b.id, "10")
    transfer_service.create(owner, a.id, c.id, "10")

    listed = transfer_service.list_transfers(owner, account_id=b.id)["data"]

    assert [t.to_account_id for t in listed] == [b.id]


def test_account_with_transfers_cannot_be_deleted(transfer_service, owner, accounts, make_account):
    a = make_account("100", name="A")
    b = make_account("10", name="B")
    transfer = transfer_service.create(owner, a.id, b.id, "40")["data"]
    account_service = AccountService(accounts)

    result = account_service.delete(owner, a.id)

    assert result["error"] == "ValidationFailed"
    assert accounts.get_by_id(a.id) is not None
    assert accounts.balance(b.id) == Decimal("50.00")

    assert transfer_service.delete(owner, transfer.id)["success"] is True
    assert accounts.balance(b.id) == Decimal("10.00")
    assert account_service.delete(owner, a.id)["success"] is True
    assert accounts.get_by_id(a.id) is None
