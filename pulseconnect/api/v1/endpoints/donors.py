from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from pulseconnect.core.config import settings
from pulseconnect.core.timeutils import to_naive_utc
from pulseconnect.database.database import get_db
from pulseconnect.models.donation import Donation
from pulseconnect.models.donor import Donor
from pulseconnect.models.user import User
from pulseconnect.schemas.donor import (
    DonorCreate,
    DonorUpdate,
    DonorResponse,
    DonorPublic,
    DonorSearchResult,
    EligibilityResponse,
)
from pulseconnect.services.donor_locator import find_nearby_donors
from pulseconnect.services.eligibility import donor_eligibility
from pulseconnect.api.v1.endpoints.auth import get_current_user, get_current_donor

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/", response_model=DonorResponse, status_code=status.HTTP_201_CREATED)
async def create_donor(
    donor: DonorCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Register the caller as a donor."""
    existing_donor = db.query(Donor).filter(Donor.user_id == current_user.id).first()
    if existing_donor:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is already registered as a donor"
        )

    data = donor.model_dump()
    data["last_donation_date"] = to_naive_utc(data["last_donation_date"])
    db_donor = Donor(**data, user_id=current_user.id, credits=0, total_donations=0)
    db.add(db_donor)
    db.commit()
    db.refresh(db_donor)

    logger.info(f"Donor created: {db_donor.id} ({db_donor.blood_group.value}) for user: {current_user.subject}")
    return db_donor

@router.get("/me", response_model=DonorResponse)
async def get_my_donor_profile(donor: Donor = Depends(get_current_donor)):
    """Get the caller's donor profile."""
    return donor

@router.put("/me", response_model=DonorResponse)
async def update_my_donor_profile(
    donor_update: DonorUpdate,
    db: Session = Depends(get_db),
    donor: Donor = Depends(get_current_donor)
):
    """Update the caller's donor profile."""
    update_data = donor_update.model_dump(exclude_unset=True)
    if "last_donation_date" in update_data:
        has_donations = db.query(Donation.id).filter(Donation.donor_id == donor.id).first() is not None
        if has_donations:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="last_donation_date is set by recorded donations and cannot be edited"
            )

    for field, value in update_data.items():
        if value is None and field != "last_donation_date":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Field '{field}' cannot be null"
            )
        if field == "last_donation_date":
            value = to_naive_utc(value)
        setattr(donor, field, value)

    db.commit()
    db.refresh(donor)

    logger.info(f"Donor updated: {donor.id} fields: {sorted(update_data)}")
    return donor

@router.get("/eligibility", response_model=EligibilityResponse)
async def get_my_eligibility(
    db: Session = Depends(get_db),
    donor: Donor = Depends(get_current_donor)
):
    """Check whether the caller may donate again."""
    eligibility = donor_eligibility(db, donor)
    return EligibilityResponse(
        can_donate=eligibility.can_donate,
        next_eligible_date=eligibility.next_eligible_date,
    )

@router.get("/search", response_model=List[DonorSearchResult])
async def search_donors(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius: int = Query(settings.DEFAULT_SEARCH_RADIUS_KM, gt=0, description="Search radius in km"),
    blood_group: Optional[str] = Query(None, alias="bloodGroup"),
    db: Session = Depends(get_db)
):
    """Available donors within ``radius`` km of a point, nearest first."""
    matches = find_nearby_donors(db, latitude, longitude, radius, blood_group)
    return [
        DonorSearchResult(
            **DonorPublic.model_validate(donor).model_dump(),
            distance_km=round(distance_km, 3),
        )
        for donor, distance_km in matches
    ]

@router.get("/{donor_id}", response_model=DonorPublic)
async def get_donor(donor_id: int, db: Session = Depends(get_db)):
    """Get a donor's public profile."""
    donor = db.query(Donor).filter(Donor.id == donor_id).first()
    if not donor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Donor not found"
        )
    return donor
