from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
from pulseconnect.database.database import get_db
from pulseconnect.models.user import User
from pulseconnect.schemas.donation import DonationVerify, DonationResponse
from pulseconnect.services import credit_ledger
from pulseconnect.api.v1.endpoints.auth import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/{request_id}/verify", response_model=DonationResponse)
async def verify_donation(
    request_id: int,
    verification: DonationVerify,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Confirm a donor's donation against one of the caller's active requests."""
    data = verification.model_dump()
    donor_id = data.pop("donor_id")
    return credit_ledger.verify_donation(
        db,
        request_id=request_id,
        donor_id=donor_id,
        verifier_user_id=current_user.id,
        **data,
    )
