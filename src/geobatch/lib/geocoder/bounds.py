"""Service-area bounding box checks for geocoded coordinates."""

from geobatch.lib.geocoder.base import coordinates_in_range

# South Korea approximate bounding box (WGS84), islands included
KR_MIN_LAT = 33.0
KR_MAX_LAT = 43.0
KR_MIN_LNG = 124.0
KR_MAX_LNG = 132.0


def is_in_korea(lat: float, lng: float) -> bool:
    """Whether coordinates fall inside the Korean service area."""
    return KR_MIN_LAT <= lat <= KR_MAX_LAT and KR_MIN_LNG <= lng <= KR_MAX_LNG


def validate_korea_coordinates(lat: float, lng: float) -> None:
    """Validate that coordinates are well-formed and inside the service area.

    Args:
        lat: WGS84 latitude.
        lng: WGS84 longitude.

    Raises:
        ValueError: If coordinates are out of WGS84 range or outside Korea.
    """
    if not coordinates_in_range(lat, lng):
        msg = f"Coordinates ({lat}, {lng}) are not valid WGS84 values."
        raise ValueError(msg)
    if not is_in_korea(lat, lng):
        msg = "Coordinates are outside the Korean service area."
        raise ValueError(msg)
