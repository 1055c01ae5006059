from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from pulseconnect.models.credit_transaction import TransactionType

class CreditSpend(BaseModel):
    amount: int = Field(..., gt=0)
    description: str = Field(..., min_length=1)
    request_id: Optional[int] = None

class CreditTransactionResponse(BaseModel):
    id: int
    donor_id: int
    transaction_type: TransactionType
    amount: int
    description: str
    related_donation_id: Optional[int] = None
    related_request_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class CreditBalanceResponse(BaseModel):
    donor_id: int
    credits: int
    ledger_balance: int

class CreditSpendResponse(BaseModel):
    message: str
    credits: int
    transaction: CreditTransactionResponse
