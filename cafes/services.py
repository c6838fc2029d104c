import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.core.paginator import EmptyPage, Page, Paginator
from django.db import transaction
from django.db.models import Sum
from rest_framework.exceptions import NotFound

from locations import geocoding
from locations.services import resolve_location, search_locations
from .models import Cafe, Vote
from .utils import bounding_box, haversine

logger = logging.getLogger(__name__)


@dataclass
class CafeResult:
    cafe: Cafe
    warnings: list = field(default_factory=list)


def _lookup_coords(address: str):
    try:
        return geocoding.geocode(address)
    except geocoding.GeocodingError:
        return None


def _resolve_geodata(name, address, city, state, country, warnings):
    # 외부 호출(지오코딩)은 트랜잭션/행 잠금 밖에서 끝낸다
    coords = _lookup_coords(address)
    if coords is None:
        warnings.append(f"There was a problem geocoding cafe {name}.")
        return None, None
    location = resolve_location(city, state, country)
    if not location.is_geocoded:
        warnings.append(f"There was a problem geocoding location {location.name}.")
    return coords, location


def create_cafe(owner, fields: dict) -> CafeResult:
    warnings = []
    cafe = Cafe(owner=owner, **fields)
    if not cafe.country:
        cafe.country = settings.CAFES_DEFAULT_COUNTRY

    coords, cafe.location = _resolve_geodata(
        cafe.name, cafe.address, cafe.city, cafe.state, cafe.country, warnings
    )
    cafe.latitude, cafe.longitude = coords or (None, None)
    with transaction.atomic():
        cafe.save()

    logger.info("created cafe %r (%s) for %s", cafe.name, cafe.slug, owner)
    return CafeResult(cafe, warnings)


def update_cafe(cafe: Cafe, fields: dict) -> CafeResult:
    warnings = []
    merged = {
        name: fields.get(name, getattr(cafe, name))
        for name in ("name", "address", "city", "state", "country")
    }

    if merged["address"] != cafe.address or not cafe.is_geocoded:
        coords, location = _resolve_geodata(warnings=warnings, **merged)
    else:
        coords = (cafe.latitude, cafe.longitude)
        location = resolve_location(merged["city"], merged["state"], merged["country"])
        if not location.is_geocoded:
            warnings.append(f"There was a problem geocoding location {location.name}.")

    with transaction.atomic():
        cafe = Cafe.objects.select_for_update().get(pk=cafe.pk)
        for name, value in fields.items():
            setattr(cafe, name, value)
        # 지오코딩 실패 시 이전 Location에 남지 않도록 함께 비운다
        cafe.latitude, cafe.longitude = coords or (None, None)
        cafe.location = location
        cafe.save()
    return CafeResult(cafe, warnings)


def regeocode_cafe(cafe: Cafe) -> bool:
    coords, location = _resolve_geodata(cafe.name, cafe.address, cafe.city, cafe.state, cafe.country, [])
    if coords is None:
        return False
    cafe.latitude, cafe.longitude = coords
    cafe.location = location
    cafe.save(update_fields=["latitude", "longitude", "location", "updated_at"])
    return True


def delete_cafe(cafe: Cafe):
    logger.info("deleting cafe %r (%s)", cafe.name, cafe.slug)
    cafe.delete()


def find_cafe(slug: str) -> Cafe:
    try:
        return Cafe.objects.select_related("location", "owner").get(slug=slug)
    except Cafe.DoesNotExist:
        raise NotFound("Sorry, that cafe does not exist")


def _parse_page(page) -> int:
    try:
        page = int(page)
    except (TypeError, ValueError):
        return 1
    return page if page > 0 else 1


def paginate(queryset, page, page_size=None) -> Page:
    paginator = Paginator(queryset, page_size or settings.CAFES_PAGE_SIZE)
    number = _parse_page(page)
    try:
        return paginator.page(number)
    except EmptyPage:
        # 마지막 페이지로 돌리지 않고 빈 페이지를 돌려준다
        return Page([], number, paginator)


def list_cafes(page=1, page_size=None) -> Page:
    return paginate(Cafe.objects.order_by("created_at", "id"), page, page_size)


def search_cafes(text: str, page=1, page_size=None):
    """Cafes in the location that best matches ``text``.

    Returns ``(page, location)``; ``location`` is ``None`` and the page empty
    when no location matches. Cafe names and addresses are never searched.
    """
    location = search_locations(text).first()
    if location is None:
        return paginate(Cafe.objects.none(), page, page_size), None

    queryset = Cafe.objects.filter(location=location).order_by("created_at", "id")
    return paginate(queryset, page, page_size), location


def nearby_cafes(cafe: Cafe, radius_km=None):
    if not cafe.is_geocoded:
        return []
    if radius_km is None:
        radius_km = settings.CAFES_NEARBY_RADIUS_KM

    min_lat, max_lat, min_lng, max_lng = bounding_box(cafe.latitude, cafe.longitude, radius_km)
    candidates = (
        Cafe.objects.exclude(pk=cafe.pk)
        .filter(
            latitude__gte=min_lat,
            latitude__lte=max_lat,
            longitude__gte=min_lng,
            longitude__lte=max_lng,
        )
    )

    items = []
    for other in candidates:
        dist = haversine(cafe.latitude, cafe.longitude, other.latitude, other.longitude)
        if dist <= radius_km:
            items.append({"cafe": other, "distance_km": dist})

    items.sort(key=lambda item: (item["distance_km"], item["cafe"].pk))
    return items


def cast_vote(cafe: Cafe, user, value: int) -> Cafe:
    with transaction.atomic():
        cafe = Cafe.objects.select_for_update().get(pk=cafe.pk)
        Vote.objects.update_or_create(user=user, cafe=cafe, defaults={"value": value})
        cafe.votes_score = cafe.votes.aggregate(total=Sum("value"))["total"] or 0
        cafe.save(update_fields=["votes_score", "updated_at"])
    return cafe
