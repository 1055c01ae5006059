"""
Nearby donor search.

Distance is the spherical law of cosines evaluated per row at query time:

    d = R * acos(cos(lat1) * cos(lat2) * cos(lon2 - lon1) + sin(lat1) * sin(lat2))

There is no spatial index, so every available donor row is scanned.
"""
import logging
import math
from typing import List, Optional, Tuple, Union

from sqlalchemy import func, literal
from sqlalchemy.orm import Session

from pulseconnect.core.config import settings
from pulseconnect.core.exceptions import InvalidParameterError
from pulseconnect.models.donor import Donor, BloodGroup

logger = logging.getLogger(__name__)


def great_circle_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in km between two points given in decimal degrees."""
    cosine = (
        math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.cos(math.radians(lon2) - math.radians(lon1))
        + math.sin(math.radians(lat1))
        * math.sin(math.radians(lat2))
    )
    # Rounding can push identical points just past 1.0
    cosine = max(-1.0, min(1.0, cosine))
    return settings.EARTH_RADIUS_KM * math.acos(cosine)


def distance_expression(latitude: float, longitude: float):
    """SQL expression for the distance in km from (latitude, longitude) to each donor row."""
    lat = literal(latitude)
    lon = literal(longitude)
    cosine = (
        func.cos(func.radians(lat))
        * func.cos(func.radians(Donor.latitude))
        * func.cos(func.radians(Donor.longitude) - func.radians(lon))
        + func.sin(func.radians(lat))
        * func.sin(func.radians(Donor.latitude))
    )
    clamped = func.least(literal(1.0), func.greatest(literal(-1.0), cosine))
    return literal(settings.EARTH_RADIUS_KM) * func.acos(clamped)


def parse_blood_group(value: Optional[Union[str, BloodGroup]]) -> Optional[BloodGroup]:
    """Parse a blood group from a query string.

    An unescaped ``+`` in a query string arrives as a space, so "A " and
    "AB " are read as "A+" and "AB+".
    """
    if value is None or isinstance(value, BloodGroup):
        return value
    cleaned = value.strip().upper()
    if not cleaned:
        return None
    if value.endswith(" ") and cleaned[-1] not in "+-":
        cleaned += "+"
    try:
        return BloodGroup(cleaned)
    except ValueError:
        raise InvalidParameterError(
            f"Invalid blood group '{value}'. Expected one of: {', '.join(g.value for g in BloodGroup)}"
        )


def validate_search(latitude: Optional[float], longitude: Optional[float], radius_km: Optional[float]) -> None:
    if latitude is None or longitude is None:
        raise InvalidParameterError("Latitude and longitude are required")
    if not -90 <= latitude <= 90:
        raise InvalidParameterError("Latitude must be between -90 and 90")
    if not -180 <= longitude <= 180:
        raise InvalidParameterError("Longitude must be between -180 and 180")
    if radius_km is None or radius_km <= 0:
        raise InvalidParameterError("Radius must be a positive number")


def find_nearby_donors(
    db: Session,
    latitude: float,
    longitude: float,
    radius_km: float,
    blood_group: Optional[Union[str, BloodGroup]] = None,
) -> List[Tuple[Donor, float]]:
    """
    Return available donors within ``radius_km`` of a point, nearest first.

    Args:
        db: Database session.
        latitude: Search point latitude in decimal degrees.
        longitude: Search point longitude in decimal degrees.
        radius_km: Inclusive search radius in km; any positive value.
        blood_group: Optional exact blood group filter.

    Returns:
        List of (donor, distance_km) pairs ordered by distance, then donor id.
    """
    validate_search(latitude, longitude, radius_km)
    group = parse_blood_group(blood_group)

    distance = distance_expression(latitude, longitude)
    query = db.query(Donor, distance.label("distance_km")).filter(Donor.is_available.is_(True))
    if group is not None:
        query = query.filter(Donor.blood_group == group)
    query = query.filter(distance <= radius_km).order_by(distance, Donor.id)

    results = [(donor, float(distance_km)) for donor, distance_km in query.all()]
    logger.info(
        f"Donor search at ({latitude}, {longitude}) radius={radius_km}km "
        f"group={group.value if group else 'any'}: {len(results)} match(es)"
    )
    return results
