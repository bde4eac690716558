from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real

# Earth mean radius (IUGG), kilometres
EARTH_RADIUS_KM = 6371.0088

# Approximate kilometres per degree of latitude used by the bounding box
_KM_PER_DEGREE = 111.0


class InvalidCoordinate(ValueError):
    """Raised when a latitude / longitude pair cannot be used for distance math."""


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float

    def validated(self) -> Coordinate:
        validate_coordinate(self.lat, self.lng)
        return self


@dataclass(frozen=True)
class BoundingBox:
    north: float
    south: float
    east: float
    west: float

    def contains(self, lat: float, lng: float) -> bool:
        """Return True if the point falls inside the box.

        Longitude spans wider than the globe (polar centers) accept any
        longitude, and spans crossing the antimeridian are wrapped.
        """
        if not (self.south <= lat <= self.north):
            return False
        if self.east - self.west >= 360.0:
            return True
        if self.west < -180.0:
            return lng >= self.west + 360.0 or lng <= self.east
        if self.east > 180.0:
            return lng <= self.east - 360.0 or lng >= self.west
        return self.west <= lng <= self.east


def _is_finite_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def validate_coordinate(lat: float, lng: float) -> None:
    """Raise ``InvalidCoordinate`` unless ``(lat, lng)`` is a usable point."""
    if not (_is_finite_number(lat) and _is_finite_number(lng)):
        raise InvalidCoordinate(
            f"Invalid coordinates ({lat!r}, {lng!r}): values must be finite numbers"
        )
    if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lng <= 180.0):
        raise InvalidCoordinate(
            f"Invalid coordinates ({lat!r}, {lng!r}): latitude must be -90 to 90, "
            "longitude must be -180 to 180"
        )


def is_valid_coordinate(lat: float, lng: float) -> bool:
    try:
        validate_coordinate(lat, lng)
    except InvalidCoordinate:
        return False
    return True


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Great-circle distance in kilometres between two points.

    The result is returned at full floating-point precision; rounding for
    display belongs to the caller.

    Raises:
        InvalidCoordinate: if any value is non-finite or out of range.
    """
    validate_coordinate(lat1, lng1)
    validate_coordinate(lat2, lng2)

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lng2 - lng1)

    sin_half_phi = math.sin(delta_phi / 2)
    sin_half_lambda = math.sin(delta_lambda / 2)
    a = (
        sin_half_phi * sin_half_phi
        + math.cos(phi1) * math.cos(phi2) * sin_half_lambda * sin_half_lambda
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_or_none(center: Coordinate, lat: float, lng: float) -> float | None:
    """Distance from *center* to ``(lat, lng)``, or ``None`` if either point is invalid."""
    try:
        return haversine_distance(center.lat, center.lng, lat, lng)
    except InvalidCoordinate:
        return None


def bounding_box(lat: float, lng: float, radius_km: float) -> BoundingBox:
    """
    Approximate box around a center point.

    Only a pre-filter: callers must still confirm candidates with
    ``haversine_distance``.
    """
    lat_delta = radius_km / _KM_PER_DEGREE
    north = lat + lat_delta
    south = lat - lat_delta

    # A circle reaching a pole spans every longitude
    if north >= 90.0 or south <= -90.0:
        lng_delta = 360.0
    else:
        cos_lat = math.cos(math.radians(lat))
        spread = math.sin(radius_km / EARTH_RADIUS_KM) / cos_lat
        if spread >= 1.0:
            lng_delta = 360.0
        else:
            # Exact longitude extent of the circle, never narrower than the flat estimate
            lng_delta = max(
                radius_km / (_KM_PER_DEGREE * cos_lat),
                math.degrees(math.asin(spread)),
            )

    return BoundingBox(
        north=north,
        south=south,
        east=lng + lng_delta,
        west=lng - lng_delta,
    )
