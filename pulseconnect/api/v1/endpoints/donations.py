from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
import logging
from pulseconnect.database.database import get_db
from pulseconnect.models.donation import Donation
from pulseconnect.models.donor import Donor
from pulseconnect.schemas.donation import DonationCreate, DonationResponse
from pulseconnect.services import credit_ledger
from pulseconnect.api.v1.endpoints.auth import get_current_donor

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/", response_model=DonationResponse, status_code=status.HTTP_201_CREATED)
async def record_donation(
    donation: DonationCreate,
    db: Session = Depends(get_db),
    donor: Donor = Depends(get_current_donor)
):
    """Record a donation by the caller and credit their balance."""
    return credit_ledger.record_donation(db, donor.id, **donation.model_dump())

@router.get("/me", response_model=List[DonationResponse])
async def get_my_donations(
    db: Session = Depends(get_db),
    donor: Donor = Depends(get_current_donor)
):
    """The caller's donation history, most recent first."""
    return (
        db.query(Donation)
        .filter(Donation.donor_id == donor.id)
        .order_by(Donation.donation_date.desc(), Donation.id.desc())
        .all()
    )
