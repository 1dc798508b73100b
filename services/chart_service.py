"""
services/chart_service.py
--------------------------
Generates chart images for spending and balances.
Uses matplotlib to create pie/bar charts and returns them as BytesIO buffers.
"""

import io
from datetime import date

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend for server use
import matplotlib.pyplot as plt

from repositories.account_repo import AccountRepository
from repositories.report_repo import ReportRepository
from utils.dates import month_bounds
from utils.logger import get_logger

logger = get_logger(__name__)

plt.rcParams["font.family"] = "DejaVu Sans"
plt.rcParams["figure.facecolor"] = "#1a1a2e"
plt.rcParams["text.color"] = "#e0e0e0"
plt.rcParams["axes.facecolor"] = "#1a1a2e"

_COLORS = [
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4",
    "#FFEAA7", "#DDA0DD", "#98D8C8", "#F7DC6F",
    "#BB8FCE", "#85C1E9", "#F1948A", "#82E0AA",
]


def _to_png(fig) -> io.BytesIO:
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=150, bbox_inches="tight",
                facecolor=fig.get_facecolor())
    buf.seek(0)
    plt.close(fig)
    return buf


class ChartService:
    """Generates visual charts from report data."""

    def __init__(self, report_repo: ReportRepository | None = None,
                 account_repo: AccountRepository | None = None):
        self.report_repo = report_repo or ReportRepository()
        self.account_repo = account_repo or AccountRepository()

    def generate_monthly_pie(self, user_id: int, currency: str,
                             year: int | None = None, month: int | None = None) -> io.BytesIO | None:
        """
        Generate a donut chart of expenses by category for a given month.

        Returns:
            BytesIO buffer with PNG image, or None if no data.
        """
        today = date.today()
        y = year or today.year
        m = month or today.month
        start, end = month_bounds(y, m)

        categories = self.report_repo.category_breakdown("expense", start, end, user_id)
        if not categories:
            return None

        labels = [c["category"] for c in categories]
        values = [float(c["amount"]) for c in categories]
        total = sum(values)
        colors = [_COLORS[i % len(_COLORS)] for i in range(len(values))]

        fig, ax = plt.subplots(figsize=(8, 6))
        wedges, _, autotexts = ax.pie(
            values,
            labels=None,
            autopct=lambda pct: f"{pct:.1f}%",
            colors=colors,
            startangle=90,
            pctdistance=0.82,
            wedgeprops=dict(width=0.5, edgecolor="#1a1a2e", linewidth=2),
        )
        for autotext in autotexts:
            autotext.set_color("white")
            autotext.set_fontsize(10)
            autotext.set_fontweight("bold")

        ax.legend(
            wedges, [f"{l}: {v:.2f} {currency}" for l, v in zip(labels, values)],
            loc="center left",
            bbox_to_anchor=(1, 0, 0.5, 1),
            fontsize=10,
            frameon=False,
        )
        ax.set_title(
            f"Expenses by category - {m:02d}/{y}\nTotal: {total:.2f} {currency}",
            fontsize=14, fontweight="bold", pad=20,
        )
        plt.tight_layout()

        logger.info(f"Generated pie chart for user {user_id}, {m}/{y}")
        return _to_png(fig)

    def generate_balances_bar(self, user_id: int) -> io.BytesIO | None:
        """
        Generate a bar chart of current account balances.

        Returns:
            BytesIO buffer with PNG image, or None if the user has no accounts.
        """
        accounts = self.account_repo.get_all(user_id)
        if not accounts:
            return None

        names = [a.name for a in accounts]
        amounts = [float(a.amount) for a in accounts]

        fig, ax = plt.subplots(figsize=(9, 5))
        bars = ax.bar(
            range(len(names)), amounts,
            color=["#4ECDC4" if a >= 0 else "#FF6B6B" for a in amounts],
            edgecolor="#1a1a2e",
            linewidth=1.5,
            width=0.6,
            zorder=3,
        )
        for bar, account in zip(bars, accounts):
            ax.text(
                bar.get_x() + bar.get_width() / 2, bar.get_height(),
                f"{account.amount:.0f} {account.base_currency}",
                ha="center", va="bottom",
                color="#e0e0e0", fontsize=10, fontweight="bold",
            )

        ax.set_xticks(range(len(names)))
        ax.set_xticklabels(names, fontsize=9, color="#e0e0e0")
        ax.set_title("Account balances", fontsize=13, fontweight="bold", pad=15)
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)
        ax.spines["left"].set_color("#444")
        ax.spines["bottom"].set_color("#444")
        ax.tick_params(colors="#e0e0e0")
        ax.grid(axis="y", alpha=0.2, color="#888")
        ax.set_axisbelow(True)
        plt.tight_layout()

        logger.info(f"Generated balances chart for user {user_id}")
        return _to_png(fig)
