import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class GeocodingError(Exception):
    pass


def _nominatim(query: str):
    url = f"{settings.GEOCODER_NOMINATIM_URL}/search"
    params = {"q": query, "format": "json", "limit": 1}
    headers = {"User-Agent": settings.GEOCODER_USER_AGENT}

    r = requests.get(url, params=params, headers=headers, timeout=settings.GEOCODER_TIMEOUT)
    r.raise_for_status()
    data = r.json()
    if not isinstance(data, list) or not data:
        return None
    return float(data[0]["lat"]), float(data[0]["lon"])


def _kakao(query: str):
    url = f"{settings.KAKAO_LOCAL_BASE}/v2/local/search/address.json"
    headers = {"Authorization": f"KakaoAK {settings.KAKAO_REST_KEY}"}
    params = {"query": query}

    r = requests.get(url, headers=headers, params=params, timeout=settings.GEOCODER_TIMEOUT)
    r.raise_for_status()
    docs = r.json().get("documents", [])
    if not docs:
        return None
    # 카카오는 x=경도, y=위도
    return float(docs[0]["y"]), float(docs[0]["x"])


PROVIDERS = {
    "nominatim": _nominatim,
    "kakao": _kakao,
}


def geocode(query: str) -> tuple[float, float]:
    """Return ``(latitude, longitude)`` for a free-text place description.

    Raises :class:`GeocodingError` when the query is blank, the provider call
    fails or nothing matches.
    """
    if not query or not query.strip():
        raise GeocodingError("empty geocoding query")

    provider = PROVIDERS.get(settings.GEOCODER_PROVIDER)
    if provider is None:
        raise GeocodingError(f"unknown geocoder provider: {settings.GEOCODER_PROVIDER}")

    try:
        coords = provider(query.strip())
    except (requests.RequestException, ValueError, KeyError, TypeError) as e:
        logger.warning("geocoding failed for %r: %s", query, e)
        raise GeocodingError(str(e)) from e

    if coords is None:
        logger.warning("geocoding returned no result for %r", query)
        raise GeocodingError(f"no result for {query!r}")
    return coords
