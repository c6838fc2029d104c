import pytest
from rest_framework.exceptions import NotFound

from cafes import services
from cafes.models import Cafe, Vote
from locations.models import Location
from tests.conftest import cafe_fields

pytestmark = pytest.mark.django_db

BASE = (-37.8136, 144.9631)


def test_create_then_find_returns_matching_record(geocoder, user):
    fields = cafe_fields()
    result = services.create_cafe(user, fields)

    cafe = services.find_cafe(result.cafe.slug)

    for name, value in fields.items():
        assert getattr(cafe, name) == value
    assert cafe.owner == user
    assert cafe.slug == "brew-co"
    assert cafe.is_geocoded
    assert result.warnings == []


def test_scenario_second_cafe_reuses_location(geocoder, user):
    geocoder.results["Springfield,IL,USA"] = (39.7817, -89.6501)

    first = services.create_cafe(user, cafe_fields()).cafe
    second = services.create_cafe(user, cafe_fields(name="Bean There", address="2 Elm St, Springfield")).cafe

    assert first.location.name == "Springfield"
    assert first.location.latitude is not None and first.location.longitude is not None
    assert second.location_id == first.location_id
    assert Location.objects.count() == 1


def test_create_with_failed_geocoding_is_saved_with_warning(geocoder, user):
    geocoder.failing.add("nowhere at all")

    result = services.create_cafe(user, cafe_fields(address="nowhere at all"))

    cafe = Cafe.objects.get(pk=result.cafe.pk)
    assert cafe.latitude is None and cafe.longitude is None
    assert cafe.location is None
    assert result.warnings == ["There was a problem geocoding cafe Brew Co."]


def test_create_warns_when_location_cannot_be_geocoded(geocoder, user):
    geocoder.failing.add("Springfield,IL,USA")

    result = services.create_cafe(user, cafe_fields())

    assert result.cafe.location.name == "Springfield"
    assert not result.cafe.location.is_geocoded
    assert result.warnings == ["There was a problem geocoding location Springfield."]


def test_create_defaults_country(geocoder, user, settings):
    settings.CAFES_DEFAULT_COUNTRY = "Australia"

    cafe = services.create_cafe(user, cafe_fields(country="")).cafe

    assert cafe.country == "Australia"


def test_slugs_are_unique_and_avoid_reserved_paths(geocoder, user):
    a = services.create_cafe(user, cafe_fields()).cafe
    b = services.create_cafe(user, cafe_fields()).cafe
    c = services.create_cafe(user, cafe_fields(name="New")).cafe

    assert (a.slug, b.slug) == ("brew-co", "brew-co-2")
    assert c.slug == "new-2"


def test_find_missing_slug_raises_not_found():
    with pytest.raises(NotFound):
        services.find_cafe("does-not-exist")


def test_update_regeocodes_changed_address_and_moves_location(geocoder, user):
    cafe = services.create_cafe(user, cafe_fields()).cafe
    geocoder.results["9 Collins St, Melbourne"] = (-37.8140, 144.9730)

    result = services.update_cafe(
        cafe, {"address": "9 Collins St, Melbourne", "city": "Melbourne", "state": "VIC", "country": "Australia"}
    )

    cafe.refresh_from_db()
    assert (cafe.latitude, cafe.longitude) == (-37.8140, 144.9730)
    assert cafe.location.name == "Melbourne"
    assert cafe.slug == "brew-co"
    assert result.warnings == []


def test_update_without_address_change_does_not_geocode(geocoder, user):
    cafe = services.create_cafe(user, cafe_fields()).cafe
    calls_before = len(geocoder.calls)

    services.update_cafe(cafe, {"description": "Now with cake"})

    cafe.refresh_from_db()
    assert cafe.description == "Now with cake"
    assert len(geocoder.calls) == calls_before


def test_delete_removes_cafe(geocoder, user):
    cafe = services.create_cafe(user, cafe_fields()).cafe

    services.delete_cafe(cafe)

    assert not Cafe.objects.filter(slug="brew-co").exists()


def test_search_unknown_location_returns_empty_page(geocoder, user):
    services.create_cafe(user, cafe_fields())

    page, location = services.search_cafes("Nowhereville")

    assert location is None
    assert list(page.object_list) == []


def test_search_never_matches_cafe_names(geocoder, user):
    services.create_cafe(user, cafe_fields())

    page, location = services.search_cafes("Brew Co")

    assert location is None
    assert list(page.object_list) == []


def test_search_returns_cafes_of_best_matching_location(geocoder, user):
    springfield = services.create_cafe(user, cafe_fields()).cafe
    services.create_cafe(user, cafe_fields(name="Shelbyville Beans", city="Shelbyville"))
    services.create_cafe(user, cafe_fields(name="West Springfield Brew", city="West Springfield"))

    page, location = services.search_cafes("springfield")

    assert location.name == "Springfield"
    assert [c.pk for c in page.object_list] == [springfield.pk]


def test_list_pagination(geocoder, user):
    created = [services.create_cafe(user, cafe_fields(name=f"Cafe {i}")).cafe for i in range(7)]

    first = services.list_cafes(1, page_size=6)
    second = services.list_cafes(2, page_size=6)
    past_end = services.list_cafes(3, page_size=6)
    garbage = services.list_cafes("abc", page_size=6)

    assert [c.pk for c in first.object_list] == [c.pk for c in created[:6]]
    assert [c.pk for c in second.object_list] == [created[6].pk]
    assert list(past_end.object_list) == []
    assert garbage.number == 1


def test_nearby_excludes_self_and_sorts_by_distance(geocoder, user):
    geocoder.results.update({
        "origin": BASE,
        "close": (BASE[0] + 0.002, BASE[1]),
        "closer": (BASE[0] + 0.001, BASE[1]),
        "medium": (BASE[0] + 0.006, BASE[1]),
        "far": (BASE[0] + 0.05, BASE[1]),
    })
    origin = services.create_cafe(user, cafe_fields(name="Origin", address="origin")).cafe
    for name in ["close", "far", "medium", "closer"]:
        services.create_cafe(user, cafe_fields(name=name, address=name))

    items = services.nearby_cafes(origin, radius_km=1.609)

    names = [item["cafe"].name for item in items]
    assert names == ["closer", "close", "medium"]
    assert "Origin" not in names
    distances = [item["distance_km"] for item in items]
    assert distances == sorted(distances)


def test_nearby_of_ungeocoded_cafe_is_empty(geocoder, user):
    geocoder.failing.add("lost")
    services.create_cafe(user, cafe_fields(name="Other"))
    lost = services.create_cafe(user, cafe_fields(name="Lost", address="lost")).cafe

    assert services.nearby_cafes(lost) == []


def test_vote_overwrites_previous_vote(geocoder, user, other_user):
    cafe = services.create_cafe(user, cafe_fields()).cafe

    services.cast_vote(cafe, user, Vote.Value.UP)
    cafe = services.cast_vote(cafe, user, Vote.Value.DOWN)
    assert cafe.votes_score == -1
    assert Vote.objects.filter(cafe=cafe, user=user).count() == 1

    services.cast_vote(cafe, other_user, Vote.Value.UP)
    services.cast_vote(cafe, other_user, Vote.Value.UP)
    cafe.refresh_from_db()
    assert cafe.votes_score == 0


def test_failed_regeocoding_on_update_clears_location(geocoder, user):
    cafe = services.create_cafe(user, cafe_fields()).cafe
    assert cafe.location.name == "Springfield"
    geocoder.failing.add("bad addr")

    result = services.update_cafe(cafe, {"address": "bad addr", "city": "Melbourne"})

    cafe.refresh_from_db()
    assert result.warnings == ["There was a problem geocoding cafe Brew Co."]
    assert cafe.latitude is None and cafe.longitude is None
    assert cafe.location is None
    page, _ = services.search_cafes("Springfield")
    assert list(page.object_list) == []


@pytest.mark.django_db(transaction=True)
def test_update_geocodes_outside_the_row_lock(geocoder, user, monkeypatch):
    cafe = services.create_cafe(user, cafe_fields()).cafe
    seen = []

    def _geocode(query):
        seen.append(services.transaction.get_connection().in_atomic_block)
        return (1.0, 2.0)

    monkeypatch.setattr(services.geocoding, "geocode", _geocode)
    services.update_cafe(cafe, {"address": "9 Collins St, Melbourne"})

    assert seen
    assert not any(seen)
