"""
services/export_service.py
---------------------------
Generates CSV and Excel exports of a month of ledger entries.
"""

import io

import pandas as pd

from repositories.account_repo import AccountRepository
from repositories.category_repo import CategoryRepository
from repositories.entry_repo import EntryRepository
from utils.dates import month_bounds
from utils.logger import get_logger

logger = get_logger(__name__)


class ExportService:
    """Generates downloadable ledger reports in CSV and Excel formats."""

    def __init__(
        self,
        entry_repo: EntryRepository | None = None,
        category_repo: CategoryRepository | None = None,
        account_repo: AccountRepository | None = None,
    ):
        self.entry_repo = entry_repo or EntryRepository()
        self.category_repo = category_repo or CategoryRepository()
        self.account_repo = account_repo or AccountRepository()

    def month_frame(self, user_id: int, year: int, month: int) -> pd.DataFrame:
        """
        One row per ledger entry of the month, oldest first.

        Columns: Date, Type, Amount, Currency, Category, Account, Label, Description.
        """
        start, end = month_bounds(year, month)
        entries = self.entry_repo.find(user_id, start=start, end=end)
        categories = {c.id: c.name for c in self.category_repo.get_all(user_id)}
        accounts = {a.id: a for a in self.account_repo.get_all(user_id)}

        data = [
            {
                "Date": e.date.isoformat(),
                "Type": e.type,
                "Amount": float(e.amount),
                "Currency": accounts[e.account_id].base_currency if e.account_id in accounts else "",
                "Category": categories.get(e.category_id, ""),
                "Account": accounts[e.account_id].name if e.account_id in accounts else "",
                "Label": e.label or "",
                "Description": e.description or "",
            }
            for e in reversed(entries)
        ]
        return pd.DataFrame(data, columns=[
            "Date", "Type", "Amount", "Currency", "Category", "Account", "Label", "Description",
        ])

    def export_month_csv(self, user_id: int, year: int, month: int) -> io.BytesIO:
        """
        Export a month's entries as a CSV file.

        Returns:
            A BytesIO buffer containing the CSV data.
        """
        df = self.month_frame(user_id, year, month)
        buffer = io.BytesIO()
        df.to_csv(buffer, index=False, encoding="utf-8-sig")
        buffer.seek(0)
        logger.info(f"Exported {len(df)} records as CSV for user {user_id}")
        return buffer

    def export_month_excel(self, user_id: int, year: int, month: int) -> io.BytesIO:
        """
        Export a month's entries as an Excel (.xlsx) file with a
        per-category summary sheet.

        Returns:
            A BytesIO buffer containing the Excel data.
        """
        df = self.month_frame(user_id, year, month)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Entries", index=False)

            if not df.empty:
                summary = df.groupby(["Type", "Category"])["Amount"].sum().reset_index()
                summary.columns = ["Type", "Category", "Total"]
                summary.to_excel(writer, sheet_name="Summary", index=False)

        buffer.seek(0)
        logger.info(f"Exported {len(df)} records as Excel for user {user_id}")
        return buffer
