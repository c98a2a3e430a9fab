"""
Account model (chart of accounts).

Every account the business tracks (cash, receivables, revenue,
rent expense, etc.) is a row here. Journal lines reference
accounts and the ledger poster keeps their running balances.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Boolean, DateTime, Numeric, Text, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from bookkeeping.models.base import Base
from bookkeeping.models.enums import AccountCategory, NormalSide, StatementType


def enum_values(enum_cls):
    """Store enum values ("asset") rather than member names ("ASSET")."""
    return [member.value for member in enum_cls]


class Account(Base):
    """
    A single account in the chart of accounts.

    balance is always expressed on the account's normal side:
    a negative balance on a debit-normal account means the
    account currently carries a credit (contra) balance.

    Accounts are never deleted, only deactivated via is_active=False.
    """

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    account_number: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False
    )
    category: Mapped[AccountCategory] = mapped_column(
        SAEnum(
            AccountCategory,
            name="account_category_enum",
            values_callable=enum_values,
        ),
        nullable=False,
    )
    subcategory: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    normal_side: Mapped[NormalSide] = mapped_column(
        SAEnum(
            NormalSide,
            name="normal_side_enum",
            values_callable=enum_values,
        ),
        nullable=False,
    )
    statement_type: Mapped[StatementType] = mapped_column(
        SAEnum(
            StatementType,
            name="statement_type_enum",
            values_callable=enum_values,
        ),
        nullable=False,
    )
    initial_balance: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    # Mutated only through AccountRegistry.apply_balance_delta
    balance: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<Account {self.account_number} {self.name} ({self.normal_side.value})>"
