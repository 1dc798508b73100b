"""
In-memory stand-ins for the repositories, with the same method signatures.
Stored objects are copied on the way in and out, like rows in a database.
"""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from itertools import count

from repositories.account_repo import MOVE_INSUFFICIENT, MOVE_MISSING, MOVE_OK


class _Table:
    def __init__(self):
        self.rows = {}
        self._ids = count(1)

    def insert(self, obj):
        obj.id = next(self._ids)
        obj.created_at = datetime.now()
        self.rows[obj.id] = replace(obj)
        return obj

    def get(self, obj_id):
        row = self.rows.get(obj_id)
        return replace(row) if row else None

    def all(self):
        return [replace(r) for r in self.rows.values()]

    def put(self, obj) -> bool:
        if obj.id not in self.rows:
            return False
        self.rows[obj.id] = replace(obj)
        return True

    def remove(self, obj_id) -> bool:
        return self.rows.pop(obj_id, None) is not None


class FakeUserRepository:
    def __init__(self):
        self.users = {}

    def ensure_user(self, telegram_id, first_name=None, role=None, currency="EUR"):
        user = self.users.setdefault(telegram_id, {
            "id": len(self.users) + 1,
            "telegram_id": telegram_id,
            "first_name": first_name,
            "role": role or "user",
            "currency": currency,
            "created_at": datetime.now(),
        })
        if role:
            user["role"] = role
        return dict(user)

    def get_by_telegram_id(self, telegram_id):
        user = self.users.get(telegram_id)
        return dict(user) if user else None

    def get_all(self):
        return [dict(u) for u in self.users.values()]


class FakeAccountRepository:
    def __init__(self, users: FakeUserRepository | None = None, transfers=None):
        self.table = _Table()
        self.users = users
        self.transfers = transfers
        self.fail_adjust_for = set()

    def add(self, account):
        return self.table.insert(account)

    def get_by_id(self, account_id):
        return self.table.get(account_id)

    def get_all(self, user_id):
        return [a for a in self.table.all() if a.user_id == user_id]

    def update_details(self, account):
        row = self.table.rows.get(account.id)
        if row is None:
            return False
        row.group, row.name, row.description = account.group, account.name, account.description
        return True

    def adjust(self, account_id, delta):
        if account_id in self.fail_adjust_for:
            raise RuntimeError("database unavailable")
        row = self.table.rows.get(account_id)
        if row is None:
            return None
        row.amount += Decimal(delta)
        return row.amount

    def move(self, from_id, to_id, amount, require_funds=True):
        source, target = self.table.rows.get(from_id), self.table.rows.get(to_id)
        if source is None or target is None:
            return MOVE_MISSING
        if require_funds and source.amount < amount:
            return MOVE_INSUFFICIENT
        source.amount -= amount
        target.amount += amount
        return MOVE_OK

    def convert_all(self, user_id, to_currency, rate):
        converted = 0
        for row in self.table.rows.values():
            if row.user_id == user_id:
                row.amount = (row.amount * Decimal(rate)).quantize(Decimal("0.01"))
                row.base_currency = to_currency
                converted += 1
        if self.users and user_id in self.users.users:
            self.users.users[user_id]["currency"] = to_currency
        return converted

    def has_transfers(self, account_id):
        return self.transfers is not None and any(
            account_id in (t.from_account_id, t.to_account_id) for t in self.transfers.table.all()
        )

    def delete(self, account_id):
        if self.has_transfers(account_id):
            return None
        return self.table.remove(account_id)

    def balance(self, account_id) -> Decimal:
        return self.table.rows[account_id].amount


class FakeCategoryRepository:
    def __init__(self):
        self.table = _Table()
        self.referenced = set()

    def add(self, category):
        if self.find(category.user_id, category.type, category.name):
            return None
        return self.table.insert(category)

    def get_by_id(self, category_id):
        return self.table.get(category_id)

    def find(self, user_id, type, name):
        for c in self.table.all():
            if (c.user_id, c.type, c.name) == (user_id, type, name):
                return c
        return None

    def get_all(self, user_id, type=None):
        return [c for c in self.table.all() if c.user_id == user_id and (not type or c.type == type)]

    def update(self, category):
        clash = self.find(category.user_id, category.type, category.name)
        if clash and clash.id != category.id:
            return None
        return self.table.put(category)

    def is_referenced(self, category_id):
        return category_id in self.referenced

    def delete(self, category_id):
        return self.table.remove(category_id)


class FakeEntryRepository:
    def __init__(self):
        self.table = _Table()
        self.fail_stamp_for = set()

    def add(self, entry):
        return self.table.insert(entry)

    def get_by_id(self, entry_id):
        return self.table.get(entry_id)

    def find(self, user_id, entry_type=None, start=None, end=None, category_id=None, account_id=None):
        found = [
            e for e in self.table.all()
            if e.user_id == user_id
            and (not entry_type or e.type == entry_type)
            and (not (start and end) or start <= e.date <= end)
            and (not category_id or e.category_id == category_id)
            and (not account_id or e.account_id == account_id)
        ]
        return sorted(found, key=lambda e: (e.date, e.id), reverse=True)

    def sum_expenses(self, user_id, category_id, start, end):
        return sum(
            (e.amount for e in self.table.all()
             if e.user_id == user_id and e.type == "expense"
             and e.category_id == category_id and start <= e.date <= end),
            Decimal("0"),
        )

    def get_recurring(self, user_id):
        return [e for e in self.table.all() if e.user_id == user_id and e.is_recurring]

    def get_recurring_due(self, patterns, on_date):
        return [
            e for e in self.table.all()
            if e.is_recurring and e.recurring_pattern in patterns
            and e.date <= on_date
            and (e.end_date is None or e.end_date >= on_date)
            and (e.last_generated_on is None or e.last_generated_on < on_date)
        ]

    def update(self, entry):
        return self.table.put(entry)

    def add_generated(self, entry):
        if entry.source_id in self.fail_stamp_for:
            raise RuntimeError("database unavailable")
        entry = self.table.insert(entry)
        self.table.rows[entry.source_id].last_generated_on = entry.date
        return entry

    def discard_generated(self, entry_id, source_id, previous):
        self.table.remove(entry_id)
        self.table.rows[source_id].last_generated_on = previous

    def delete(self, entry_id):
        return self.table.remove(entry_id)


class FakeTransferRepository:
    def __init__(self):
        self.table = _Table()

    def add(self, transfer):
        return self.table.insert(transfer)

    def get_by_id(self, transfer_id):
        return self.table.get(transfer_id)

    def find(self, user_id, start=None, end=None, account_id=None):
        return [
            t for t in self.table.all()
            if t.user_id == user_id
            and (not (start and end) or start <= t.date <= end)
            and (not account_id or account_id in (t.from_account_id, t.to_account_id))
        ]

    def delete(self, transfer_id):
        return self.table.remove(transfer_id)


class FakeBudgetRepository:
    def __init__(self):
        self.table = _Table()

    def add(self, budget):
        if self._clashes(budget):
            return None
        return self.table.insert(budget)

    def get_by_id(self, budget_id):
        return self.table.get(budget_id)

    def find(self, user_id, category_id=None, active_on=None):
        return [
            b for b in self.table.all()
            if b.user_id == user_id
            and (not category_id or b.category_id == category_id)
            and (not active_on or b.covers(active_on))
        ]

    def find_overlapping(self, user_id, category_id, date_from, date_to, exclude_id=None):
        return [
            b for b in self.find(user_id, category_id=category_id)
            if b.overlaps(date_from, date_to) and b.id != exclude_id
        ]

    def find_covering(self, user_id, category_id, day):
        budgets = self.find(user_id, category_id=category_id, active_on=day)
        return budgets[0] if budgets else None

    def update(self, budget):
        if self._clashes(budget):
            return None
        return self.table.put(budget)

    def _clashes(self, budget):
        return any(
            b.user_id == budget.user_id and b.category_id == budget.category_id
            and b.id != budget.id and b.overlaps(budget.date_from, budget.date_to)
            for b in self.table.all()
        )

    def delete(self, budget_id):
        return self.table.remove(budget_id)


class FakeSavingsRepository:
    def __init__(self):
        self.table = _Table()

    def add(self, goal):
        return self.table.insert(goal)

    def get_by_id(self, goal_id):
        return self.table.get(goal_id)

    def get_all(self, user_id, status=None):
        return [g for g in self.table.all() if g.user_id == user_id and (not status or g.status == status)]

    def update(self, goal):
        return self.table.put(goal)

    def delete(self, goal_id):
        return self.table.remove(goal_id)
