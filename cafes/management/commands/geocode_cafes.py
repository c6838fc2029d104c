from django.core.management.base import BaseCommand
from django.db.models import Q
from cafes.models import Cafe
from cafes.services import regeocode_cafe


class Command(BaseCommand):
    help = "Geocode cafes that have no coordinates and attach their locations"

    def handle(self, *args, **options):
        pending = Cafe.objects.filter(Q(latitude__isnull=True) | Q(longitude__isnull=True))
        total, updated = 0, 0
        for cafe in pending:
            total += 1
            if regeocode_cafe(cafe):
                updated += 1
        self.stdout.write(self.style.SUCCESS(f"Geocoded cafes: {updated}/{total}"))
