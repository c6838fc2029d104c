MARKER_STYLE = {
    "marker-color": "#00607d",
    "marker-symbol": "circle",
    "marker-size": "medium",
}


def cafe_to_feature(cafe):
    return {
        "type": "Feature",
        "geometry": {
            "type": "Point",
            "coordinates": [cafe.longitude, cafe.latitude],
        },
        "properties": {
            "name": cafe.name,
            "address": cafe.address,
            **MARKER_STYLE,
        },
    }


def cafes_to_features(cafes) -> list[dict]:
    return [cafe_to_feature(cafe) for cafe in cafes]

