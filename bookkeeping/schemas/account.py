"""
Pydantic schemas for chart-of-accounts operations.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from bookkeeping.models.enums import AccountCategory, NormalSide, StatementType


class AccountCreate(BaseModel):
    """
    Request to add an account to the chart of accounts.

    normal_side and statement_type default from the category
    when left out.
    """
    account_number: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=100)
    category: AccountCategory
    subcategory: str | None = Field(default=None, max_length=100)
    normal_side: NormalSide | None = None
    statement_type: StatementType | None = None
    initial_balance: Decimal = Field(default=Decimal("0.00"), decimal_places=2)
    description: str | None = None


class AccountResponse(BaseModel):
    id: int
    account_number: str
    name: str
    category: AccountCategory
    subcategory: str | None
    normal_side: NormalSide
    statement_type: StatementType
    initial_balance: Decimal
    balance: Decimal
    description: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
