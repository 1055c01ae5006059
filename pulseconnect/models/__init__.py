# Database models
from .user import User
from .donor import Donor, BloodGroup
from .blood_request import BloodRequest, Urgency, RequestStatus, STATUS_TRANSITIONS
from .donation import Donation
from .credit_transaction import CreditTransaction, TransactionType
from .request_response import RequestResponse, ResponseStatus
