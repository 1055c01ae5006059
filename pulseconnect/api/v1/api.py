from fastapi import APIRouter
from pulseconnect.api.v1.endpoints import auth, donors, blood_requests, donations, verification, credits

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(donors.router, prefix="/donors", tags=["donors"])
api_router.include_router(blood_requests.router, prefix="/blood-requests", tags=["blood-requests"])
api_router.include_router(donations.router, prefix="/donations", tags=["donations"])
api_router.include_router(verification.router, prefix="/requests", tags=["verification"])
api_router.include_router(credits.router, prefix="/credits", tags=["credits"])
