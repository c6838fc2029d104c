from rest_framework import serializers

from locations.serializers import LocationSerializer
from .models import Cafe


class CafeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Cafe
        fields = ["name", "address", "description", "city", "state", "country"]
        extra_kwargs = {
            "description": {"required": False},
            "state": {"required": False},
            "country": {"required": False},
        }


class CafeDetailSerializer(serializers.ModelSerializer):
    owner = serializers.CharField(source="owner.username", read_only=True)
    location = LocationSerializer(read_only=True)

    class Meta:
        model = Cafe
        fields = [
            "id",
            "slug",
            "name",
            "address",
            "description",
            "city",
            "state",
            "country",
            "latitude",
            "longitude",
            "owner",
            "location",
            "votes_score",
            "created_at",
            "updated_at",
        ]


def error_messages(errors):
    # {"name": ["..."]} -> ["Name: ..."]
    messages = []
    for field, field_errors in errors.items():
        label = field.replace("_", " ").capitalize()
        for err in field_errors:
            messages.append(str(err) if field == "non_field_errors" else f"{label}: {err}")
    return messages
