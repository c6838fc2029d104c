from math import atan2, cos, radians, sin, sqrt

EARTH_RADIUS_KM = 6371.0


def haversine(lat1, lon1, lat2, lon2):
    phi1, phi2 = radians(lat1), radians(lat2)
    d_phi = radians(lat2 - lat1)
    d_lambda = radians(lon2 - lon1)
    a = sin(d_phi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_KM * 2 * atan2(sqrt(a), sqrt(1 - a))


def bounding_box(lat, lng, radius_km):
    # haversine 계산 전 DB 단에서 후보를 줄이기 위한 대략적인 범위
    d_lat = radius_km / 111.0
    d_lng = radius_km / max(111.0 * cos(radians(lat)), 1e-6)
    return lat - d_lat, lat + d_lat, lng - d_lng, lng + d_lng
