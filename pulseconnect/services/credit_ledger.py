"""
Credit ledger and donation recording.

``donors.credits`` is a cached aggregate of ``credit_transactions``. It is only
ever changed by a conditional UPDATE issued in the same database transaction
as the ledger insert that explains it, so the cache and the log commit or
roll back together.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import case, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pulseconnect.core.config import settings
from pulseconnect.core.exceptions import (
    ForbiddenError,
    InsufficientCreditsError,
    InvalidParameterError,
    NotEligibleError,
    NotFoundError,
    PersistenceError,
    PulseConnectError,
    StateConflictError,
)
from pulseconnect.core.timeutils import utcnow, to_naive_utc
from pulseconnect.models.blood_request import BloodRequest, RequestStatus
from pulseconnect.models.credit_transaction import CreditTransaction, TransactionType
from pulseconnect.models.donation import Donation
from pulseconnect.models.donor import Donor, BloodGroup
from pulseconnect.services.eligibility import donor_eligibility

logger = logging.getLogger(__name__)


def _validate_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidParameterError("Amount must be a positive integer")


def _append_transaction(
    db: Session,
    donor_id: int,
    transaction_type: TransactionType,
    amount: int,
    description: str,
    related_donation_id: Optional[int] = None,
    related_request_id: Optional[int] = None,
) -> CreditTransaction:
    transaction = CreditTransaction(
        donor_id=donor_id,
        transaction_type=transaction_type,
        amount=amount,
        description=description,
        related_donation_id=related_donation_id,
        related_request_id=related_request_id,
    )
    db.add(transaction)
    db.flush()
    return transaction


def _add_to_balance(db: Session, donor_id: int, amount: int) -> None:
    updated = (
        db.query(Donor)
        .filter(Donor.id == donor_id)
        .update({Donor.credits: Donor.credits + amount}, synchronize_session=False)
    )
    if updated == 0:
        raise NotFoundError("Donor not found")


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{action} failed on commit, rolled back: {e}")
        raise PersistenceError(f"Failed to {action}") from e


def _rollback_and_raise(db: Session, action: str, error: Exception):
    db.rollback()
    if isinstance(error, PulseConnectError):
        raise error
    logger.error(f"{action} failed, rolled back: {error}", exc_info=True)
    raise PersistenceError(f"Failed to {action}") from error


def earn_credits(
    db: Session,
    donor_id: int,
    amount: int,
    description: str,
    related_donation_id: Optional[int] = None,
) -> CreditTransaction:
    """Append an earned transaction and raise the donor's balance by ``amount``."""
    _validate_amount(amount)
    try:
        _add_to_balance(db, donor_id, amount)
        transaction = _append_transaction(
            db, donor_id, TransactionType.EARNED, amount, description,
            related_donation_id=related_donation_id,
        )
    except (SQLAlchemyError, PulseConnectError) as e:
        _rollback_and_raise(db, "add credits", e)
    _commit(db, "add credits")
    logger.info(f"Donor {donor_id} earned {amount} credit(s): {description}")
    return transaction


def spend_credits(
    db: Session,
    donor_id: int,
    amount: int,
    description: str,
    related_request_id: Optional[int] = None,
) -> CreditTransaction:
    """
    Spend ``amount`` credits.

    The balance check and the decrement are a single conditional UPDATE, so
    two concurrent spends can never drive the balance negative.

    Raises:
        InvalidParameterError: amount is not a positive integer.
        NotFoundError: the donor does not exist.
        InsufficientCreditsError: the balance is lower than ``amount``.
    """
    _validate_amount(amount)
    if related_request_id is not None and db.query(BloodRequest.id).filter(BloodRequest.id == related_request_id).first() is None:
        raise NotFoundError("Blood request not found")
    try:
        updated = (
            db.query(Donor)
            .filter(Donor.id == donor_id, Donor.credits >= amount)
            .update({Donor.credits: Donor.credits - amount}, synchronize_session=False)
        )
        if updated == 0:
            exists = db.query(Donor.id).filter(Donor.id == donor_id).first()
            if exists is None:
                raise NotFoundError("Donor not found")
            raise InsufficientCreditsError()
        transaction = _append_transaction(
            db, donor_id, TransactionType.SPENT, amount, description,
            related_request_id=related_request_id,
        )
    except (SQLAlchemyError, PulseConnectError) as e:
        _rollback_and_raise(db, "spend credits", e)
    _commit(db, "spend credits")
    logger.info(f"Donor {donor_id} spent {amount} credit(s): {description}")
    return transaction


def _apply_donation(
    db: Session,
    donor: Donor,
    donation_date: datetime,
    blood_group: Optional[BloodGroup],
    units_given: int,
    credits_earned: int,
    hospital_name: Optional[str],
    notes: Optional[str],
    request_id: Optional[int] = None,
) -> Donation:
    """Insert the donation and apply its donor and ledger effects. Does not commit."""
    donation = Donation(
        donor_id=donor.id,
        request_id=request_id,
        donation_date=donation_date,
        blood_group=blood_group or donor.blood_group,
        units_given=units_given,
        credits_earned=credits_earned,
        hospital_name=hospital_name,
        notes=notes,
    )
    db.add(donation)
    db.flush()

    db.query(Donor).filter(Donor.id == donor.id).update(
        {
            Donor.total_donations: Donor.total_donations + 1,
            Donor.last_donation_date: case(
                (
                    or_(Donor.last_donation_date.is_(None), Donor.last_donation_date < donation_date),
                    donation_date,
                ),
                else_=Donor.last_donation_date,
            ),
            Donor.credits: Donor.credits + credits_earned,
        },
        synchronize_session=False,
    )
    _append_transaction(
        db,
        donor.id,
        TransactionType.EARNED,
        credits_earned,
        f"Blood donation on {donation_date.strftime('%Y-%m-%d')}",
        related_donation_id=donation.id,
        related_request_id=request_id,
    )
    return donation


def _donation_values(donation_date, units_given, credits_earned):
    donation_date = to_naive_utc(donation_date) or utcnow()
    if credits_earned is None:
        credits_earned = settings.DONATION_CREDITS
    _validate_amount(credits_earned)
    if units_given is None or units_given <= 0:
        raise InvalidParameterError("Units given must be a positive integer")
    return donation_date, credits_earned


def record_donation(
    db: Session,
    donor_id: int,
    donation_date: Optional[datetime] = None,
    blood_group: Optional[BloodGroup] = None,
    units_given: int = 1,
    credits_earned: Optional[int] = None,
    hospital_name: Optional[str] = None,
    notes: Optional[str] = None,
    request_id: Optional[int] = None,
) -> Donation:
    """
    Record a donation for an eligible donor.

    Inserts the donation, bumps ``total_donations``, moves
    ``last_donation_date`` forward (never back), adds the earned credits to the
    cached balance and appends the matching ledger entry, all in one transaction.

    Raises:
        NotFoundError: donor (or referenced request) does not exist.
        NotEligibleError: the donor donated less than the minimum interval ago.
        PersistenceError: any write failed; nothing was kept.
    """
    donation_date, credits_earned = _donation_values(donation_date, units_given, credits_earned)

    donor = db.query(Donor).filter(Donor.id == donor_id).first()
    if not donor:
        raise NotFoundError("Donor profile not found")

    eligibility = donor_eligibility(db, donor)
    if not eligibility.can_donate:
        raise NotEligibleError(extra={"next_eligible_date": eligibility.next_eligible_date})

    if request_id is not None and db.query(BloodRequest.id).filter(BloodRequest.id == request_id).first() is None:
        raise NotFoundError("Blood request not found")

    try:
        donation = _apply_donation(
            db, donor, donation_date, blood_group, units_given, credits_earned,
            hospital_name, notes, request_id=request_id,
        )
    except (SQLAlchemyError, PulseConnectError) as e:
        _rollback_and_raise(db, "record donation", e)
    _commit(db, "record donation")
    db.refresh(donation)

    logger.info(f"Donation {donation.id} recorded for donor {donor_id}, {credits_earned} credit(s) earned")
    return donation


def verify_donation(
    db: Session,
    request_id: int,
    donor_id: int,
    verifier_user_id: int,
    donation_date: Optional[datetime] = None,
    blood_group: Optional[BloodGroup] = None,
    units_given: int = 1,
    credits_earned: Optional[int] = None,
    hospital_name: Optional[str] = None,
    notes: Optional[str] = None,
) -> Donation:
    """
    Confirm that ``donor_id`` donated for ``request_id`` and fulfil the request.

    Only the requester may verify. The request must still be active; the
    active -> fulfilled transition is a conditional UPDATE in the same
    transaction as the donation effects, so a request is fulfilled at most once.

    Raises:
        NotFoundError: request or donor does not exist.
        ForbiddenError: caller is not the requester.
        StateConflictError: request is no longer active.
        PersistenceError: any write failed; nothing was kept.
    """
    donation_date, credits_earned = _donation_values(donation_date, units_given, credits_earned)

    request = db.query(BloodRequest).filter(BloodRequest.id == request_id).first()
    if not request:
        raise NotFoundError("Blood request not found")
    if request.requester_id != verifier_user_id:
        raise ForbiddenError("Not allowed to verify this request")
    if request.status != RequestStatus.ACTIVE:
        raise StateConflictError(f"Blood request is {request.status.value}, not active")

    donor = db.query(Donor).filter(Donor.id == donor_id).first()
    if not donor:
        raise NotFoundError("Donor not found")

    try:
        fulfilled = (
            db.query(BloodRequest)
            .filter(BloodRequest.id == request_id, BloodRequest.status == RequestStatus.ACTIVE)
            .update({BloodRequest.status: RequestStatus.FULFILLED}, synchronize_session=False)
        )
        if fulfilled == 0:
            raise StateConflictError("Blood request is no longer active")
        donation = _apply_donation(
            db, donor, donation_date, blood_group, units_given, credits_earned,
            hospital_name, notes, request_id=request_id,
        )
    except (SQLAlchemyError, PulseConnectError) as e:
        _rollback_and_raise(db, "verify donation", e)
    _commit(db, "verify donation")
    db.refresh(donation)

    logger.info(f"Request {request_id} fulfilled by donor {donor_id} (donation {donation.id})")
    return donation


def ledger_balance(db: Session, donor_id: int) -> int:
    """Balance recomputed from the ledger: sum(earned) - sum(spent)."""
    signed = case(
        (CreditTransaction.transaction_type == TransactionType.SPENT, -CreditTransaction.amount),
        else_=CreditTransaction.amount,
    )
    total = (
        db.query(func.coalesce(func.sum(signed), 0))
        .filter(CreditTransaction.donor_id == donor_id)
        .scalar()
    )
    return int(total)


def list_transactions(db: Session, donor_id: int) -> List[CreditTransaction]:
    return (
        db.query(CreditTransaction)
        .filter(CreditTransaction.donor_id == donor_id)
        .order_by(CreditTransaction.created_at.desc(), CreditTransaction.id.desc())
        .all()
    )
