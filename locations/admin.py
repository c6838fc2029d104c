from django.contrib import admin
from .models import Location


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ("name", "state", "country", "latitude", "longitude", "created_at")
    search_fields = ("name", "state", "country")
    list_filter = ("country", "state")
