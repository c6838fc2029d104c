import logging

from django.db import IntegrityError, transaction
from django.db.models import Case, IntegerField, Value, When

from locations import geocoding
from locations.models import Location

logger = logging.getLogger(__name__)


def resolve_location(city_name: str, state: str = "", country: str = "") -> Location:
    # 이름이 같은 Location이 있으면 state/country는 다시 확인하지 않는다
    existing = Location.objects.filter(name=city_name).first()
    if existing:
        return existing

    location = Location(name=city_name, state=state or "", country=country or "")
    try:
        location.latitude, location.longitude = geocoding.geocode(
            f"{city_name},{state or ''},{country or ''}"
        )
    except geocoding.GeocodingError:
        logger.warning("saving location %r without coordinates", city_name)

    try:
        with transaction.atomic():
            location.save()
    except IntegrityError:
        # 동시에 같은 이름으로 생성된 경우 먼저 저장된 쪽을 사용
        return Location.objects.get(name=city_name)

    logger.info("created location %r (%s, %s)", location.name, location.latitude, location.longitude)
    return location


def search_locations(text: str):
    text = (text or "").strip()
    if not text:
        return Location.objects.none()

    return (
        Location.objects.filter(name__icontains=text)
        .annotate(
            rank=Case(
                When(name__iexact=text, then=Value(0)),
                When(name__istartswith=text, then=Value(1)),
                default=Value(2),
                output_field=IntegerField(),
            )
        )
        .order_by("rank", "name", "id")
    )
