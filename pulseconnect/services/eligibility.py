"""Donation eligibility: a minimum interval between two donations."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import func
from sqlalchemy.orm import Session

from pulseconnect.core.config import settings
from pulseconnect.core.timeutils import utcnow, to_naive_utc
from pulseconnect.models.donation import Donation
from pulseconnect.models.donor import Donor


@dataclass(frozen=True)
class Eligibility:
    can_donate: bool
    next_eligible_date: Optional[datetime] = None


def check_eligibility(
    last_donation_date: Optional[datetime],
    now: Optional[datetime] = None,
    interval_months: Optional[int] = None,
) -> Eligibility:
    """
    Decide whether a donor may give blood again.

    A donor with no recorded donation is eligible. Otherwise the donor may give
    again from ``last_donation_date + interval_months`` calendar months
    (default from ``DONATION_INTERVAL_MONTHS``). Month arithmetic clamps to the
    end of the month, so 31 August + 6 months is 28/29 February.

    Args:
        last_donation_date: Date of the most recent donation, or None.
        now: Reference time; defaults to the current UTC time.
        interval_months: Override of the configured interval.

    Returns:
        Eligibility with ``next_eligible_date`` set only when not eligible.
    """
    if last_donation_date is None:
        return Eligibility(can_donate=True)

    months = interval_months if interval_months is not None else settings.DONATION_INTERVAL_MONTHS
    next_eligible = to_naive_utc(last_donation_date) + relativedelta(months=months)
    reference = to_naive_utc(now) if now is not None else utcnow()

    if reference >= next_eligible:
        return Eligibility(can_donate=True)
    return Eligibility(can_donate=False, next_eligible_date=next_eligible)


def latest_donation_date(db: Session, donor: Donor) -> Optional[datetime]:
    """
    Most recent donation date known for ``donor``.

    Recorded donations always count; the self-reported
    ``donors.last_donation_date`` only counts when it is later than all of them.
    """
    recorded = (
        db.query(func.max(Donation.donation_date))
        .filter(Donation.donor_id == donor.id)
        .scalar()
    )
    declared = to_naive_utc(donor.last_donation_date)
    candidates = [d for d in (recorded, declared) if d is not None]
    return max(candidates) if candidates else None


def donor_eligibility(db: Session, donor: Donor, now: Optional[datetime] = None) -> Eligibility:
    return check_eligibility(latest_donation_date(db, donor), now=now)
