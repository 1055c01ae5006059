from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from typing import Optional
import logging
from pulseconnect.core.security import verify_token
from pulseconnect.database.database import get_db
from pulseconnect.models.donor import Donor
from pulseconnect.models.user import User
from pulseconnect.schemas.user import UserResponse

logger = logging.getLogger(__name__)
router = APIRouter()

bearer_scheme = HTTPBearer(auto_error=False)

PROFILE_CLAIMS = ("email", "first_name", "last_name", "profile_image_url")

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the caller from a bearer token, creating or refreshing their user row."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(credentials.credentials)
    subject = str(payload["sub"])

    user = db.query(User).filter(User.subject == subject).first()
    if not user:
        user = User(subject=subject)
        db.add(user)
        logger.info(f"New user registered from token: {subject}")

    changed = user.id is None
    for claim in PROFILE_CLAIMS:
        value = payload.get(claim)
        if value is not None and getattr(user, claim) != value:
            setattr(user, claim, value)
            changed = True

    if changed:
        db.commit()
        db.refresh(user)
    return user

def get_current_donor(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Donor:
    """Donor profile of the caller; 404 when they have not registered as a donor."""
    donor = db.query(Donor).filter(Donor.user_id == current_user.id).first()
    if not donor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Donor profile not found"
        )
    return donor

@router.get("/user", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)):
    """Get the authenticated user."""
    return current_user
