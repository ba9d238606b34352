import math

from dating_api.models.profile_model import DiscoverProfile, Location


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> int:
    """Great-circle distance in whole kilometres (spherical law of cosines)."""
    rad_lat1 = math.pi * lat1 / 180
    rad_lat2 = math.pi * lat2 / 180
    rad_theta = math.pi * (lon1 - lon2) / 180

    dist = math.sin(rad_lat1) * math.sin(rad_lat2) + math.cos(rad_lat1) * math.cos(rad_lat2) * math.cos(rad_theta)
    dist = max(min(dist, 1.0), -1.0)

    dist = math.degrees(math.acos(dist))
    miles = dist * 60 * 1.1515
    return int(miles * 1.609344)


def sort_profiles_by_location(profiles: list[DiscoverProfile], location: Location) -> None:
    for profile in profiles:
        profile.distance_from_me = distance_km(location.lat, location.long, profile.lat, profile.long)
    profiles.sort(key=lambda p: p.distance_from_me)
