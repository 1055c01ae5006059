from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
import logging
from pulseconnect.database.database import get_db
from pulseconnect.models.donor import Donor
from pulseconnect.schemas.credit import (
    CreditSpend,
    CreditSpendResponse,
    CreditBalanceResponse,
    CreditTransactionResponse,
)
from pulseconnect.services import credit_ledger
from pulseconnect.api.v1.endpoints.auth import get_current_donor

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("/transactions", response_model=List[CreditTransactionResponse])
async def get_my_transactions(
    db: Session = Depends(get_db),
    donor: Donor = Depends(get_current_donor)
):
    """The caller's credit ledger, newest first."""
    return credit_ledger.list_transactions(db, donor.id)

@router.get("/balance", response_model=CreditBalanceResponse)
async def get_my_balance(
    db: Session = Depends(get_db),
    donor: Donor = Depends(get_current_donor)
):
    """Cached balance alongside the balance recomputed from the ledger."""
    return CreditBalanceResponse(
        donor_id=donor.id,
        credits=donor.credits,
        ledger_balance=credit_ledger.ledger_balance(db, donor.id),
    )

@router.post("/spend", response_model=CreditSpendResponse)
async def spend_credits(
    spend: CreditSpend,
    db: Session = Depends(get_db),
    donor: Donor = Depends(get_current_donor)
):
    """Spend credits from the caller's balance."""
    transaction = credit_ledger.spend_credits(
        db,
        donor.id,
        spend.amount,
        spend.description,
        related_request_id=spend.request_id,
    )
    db.refresh(donor)
    return CreditSpendResponse(
        message="Credits spent successfully",
        credits=donor.credits,
        transaction=CreditTransactionResponse.model_validate(transaction),
    )
