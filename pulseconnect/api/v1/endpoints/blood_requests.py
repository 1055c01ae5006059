from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List
import logging
from pulseconnect.database.database import get_db
from pulseconnect.models.blood_request import BloodRequest, RequestStatus, STATUS_TRANSITIONS
from pulseconnect.models.donor import Donor
from pulseconnect.models.request_response import RequestResponse
from pulseconnect.models.user import User
from pulseconnect.schemas.blood_request import (
    BloodRequestCreate,
    BloodRequestResponse,
    BloodRequestStatusUpdate,
    RequestResponseCreate,
    RequestResponseOut,
)
from pulseconnect.api.v1.endpoints.auth import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()

def _newest_first(query):
    return query.order_by(BloodRequest.created_at.desc(), BloodRequest.id.desc())

@router.post("/", response_model=BloodRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_blood_request(
    blood_request: BloodRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Post a new blood request on behalf of the caller."""
    db_request = BloodRequest(
        **blood_request.model_dump(),
        requester_id=current_user.id,
        status=RequestStatus.ACTIVE,
    )
    db.add(db_request)
    db.commit()
    db.refresh(db_request)

    logger.info(
        f"Blood request {db_request.id} created: {db_request.blood_group.value} "
        f"({db_request.urgency.value}) by user: {current_user.subject}"
    )
    return db_request

@router.get("/", response_model=List[BloodRequestResponse])
async def get_active_blood_requests(db: Session = Depends(get_db)):
    """All active blood requests, newest first."""
    return _newest_first(
        db.query(BloodRequest).filter(BloodRequest.status == RequestStatus.ACTIVE)
    ).all()

@router.get("/me", response_model=List[BloodRequestResponse])
async def get_my_blood_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """The caller's own blood requests, newest first."""
    return _newest_first(
        db.query(BloodRequest).filter(BloodRequest.requester_id == current_user.id)
    ).all()

@router.get("/responses/me", response_model=List[RequestResponseOut])
async def get_responses_to_my_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Donor responses to any of the caller's requests, newest first."""
    return (
        db.query(RequestResponse)
        .join(BloodRequest, RequestResponse.request_id == BloodRequest.id)
        .filter(BloodRequest.requester_id == current_user.id)
        .order_by(RequestResponse.created_at.desc(), RequestResponse.id.desc())
        .all()
    )

def _get_request_or_404(db: Session, request_id: int) -> BloodRequest:
    blood_request = db.query(BloodRequest).filter(BloodRequest.id == request_id).first()
    if not blood_request:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Blood request not found"
        )
    return blood_request

@router.get("/{request_id}/responses", response_model=List[RequestResponseOut])
async def get_request_responses(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Responses to one of the caller's requests."""
    blood_request = _get_request_or_404(db, request_id)
    if blood_request.requester_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized to view responses for this request"
        )
    return (
        db.query(RequestResponse)
        .filter(RequestResponse.request_id == request_id)
        .order_by(RequestResponse.created_at.desc(), RequestResponse.id.desc())
        .all()
    )

@router.put("/{request_id}/status", response_model=BloodRequestResponse)
async def update_blood_request_status(
    request_id: int,
    status_update: BloodRequestStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Fulfil or cancel one of the caller's active requests."""
    blood_request = _get_request_or_404(db, request_id)
    if blood_request.requester_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized to update this request"
        )

    current_status = blood_request.status
    new_status = status_update.status
    if new_status not in STATUS_TRANSITIONS[current_status]:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot change status from {current_status.value} to {new_status.value}"
        )

    updated = (
        db.query(BloodRequest)
        .filter(BloodRequest.id == request_id, BloodRequest.status == current_status)
        .update({BloodRequest.status: new_status}, synchronize_session=False)
    )
    if updated == 0:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Blood request status changed concurrently"
        )
    db.commit()
    db.refresh(blood_request)

    logger.info(f"Blood request {request_id}: {current_status.value} -> {new_status.value} by user: {current_user.subject}")
    return blood_request

@router.post("/{request_id}/respond", response_model=RequestResponseOut, status_code=status.HTTP_201_CREATED)
async def respond_to_blood_request(
    request_id: int,
    response: RequestResponseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Accept or reject an active blood request as a donor."""
    blood_request = db.query(BloodRequest).filter(BloodRequest.id == request_id).first()
    if not blood_request or blood_request.status != RequestStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Active blood request not found"
        )

    donor = db.query(Donor).filter(Donor.user_id == current_user.id).first()
    if not donor:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only donors can respond to requests"
        )

    db_response = RequestResponse(request_id=request_id, donor_id=donor.id, status=response.status)
    db.add(db_response)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already responded to this request"
        )
    db.refresh(db_response)

    logger.info(f"Donor {donor.id} {response.status.value} blood request {request_id}")
    return db_response
