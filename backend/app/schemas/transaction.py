"""
Pydantic schemas for chapter ledger endpoints.
"""
from typing import Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field, model_validator

from app.models.transaction import AccountType, TransactionType
from app.schemas.common import BaseResponse, UTCDatetime


class TransactionCreate(BaseModel):
    """Book a cash or bank transaction against a chapter."""
    date: UTCDatetime
    account_type: AccountType
    transaction_type: TransactionType
    amount: Decimal = Field(..., gt=0, decimal_places=2)

    transaction_head: Optional[str] = Field(None, max_length=200)
    narration: Optional[str] = None
    transaction_details: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)
    reference: Optional[str] = Field(None, max_length=100)

    has_invoice: bool = False
    gst_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    gst_amount: Optional[Decimal] = Field(None, ge=0)
    invoice_number: Optional[str] = Field(None, max_length=100)
    party_name: Optional[str] = Field(None, max_length=200)
    party_gst_no: Optional[str] = Field(None, max_length=20)
    party_address: Optional[str] = None


class TransactionUpdate(BaseModel):
    """Update a transaction. Balances are recomputed from scratch afterwards."""
    date: Optional[UTCDatetime] = None
    account_type: Optional[AccountType] = None
    transaction_type: Optional[TransactionType] = None
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)

    transaction_head: Optional[str] = Field(None, max_length=200)
    narration: Optional[str] = None
    transaction_details: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)
    reference: Optional[str] = Field(None, max_length=100)

    has_invoice: Optional[bool] = None
    gst_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    gst_amount: Optional[Decimal] = Field(None, ge=0)
    invoice_number: Optional[str] = Field(None, max_length=100)
    party_name: Optional[str] = Field(None, max_length=200)
    party_gst_no: Optional[str] = Field(None, max_length=20)
    party_address: Optional[str] = None

    class Config:
        extra = "forbid"

    @model_validator(mode="after")
    def check_fields(self):
        if not self.model_fields_set:
            raise ValueError("At least one field is required")
        for field in ("date", "account_type", "transaction_type", "amount", "has_invoice"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class TransactionResponse(BaseResponse):
    """Transaction response."""
    chapter_id: str
    date: datetime
    account_type: AccountType
    transaction_type: TransactionType
    amount: Decimal
    transaction_head: Optional[str] = None
    narration: Optional[str] = None
    transaction_details: Optional[str] = None
    description: Optional[str] = None
    reference: Optional[str] = None
    has_invoice: bool = False
    gst_rate: Optional[Decimal] = None
    gst_amount: Optional[Decimal] = None
    invoice_number: Optional[str] = None
    party_name: Optional[str] = None
    party_gst_no: Optional[str] = None
    party_address: Optional[str] = None


class ChapterBalances(BaseModel):
    """Opening and closing balances of a chapter's two accounts."""
    chapter_id: str
    bank_opening_balance: Decimal
    bank_closing_balance: Decimal
    cash_opening_balance: Decimal
    cash_closing_balance: Decimal


class TransactionListResponse(BaseModel):
    """Paginated list of transactions together with the chapter balances."""
    page: int
    perPage: int
    totalItems: int
    totalPages: int
    items: list[TransactionResponse]
    balances: ChapterBalances
