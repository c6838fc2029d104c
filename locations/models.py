from django.db import models


class Location(models.Model):
    # 카페가 하나 이상 등록된 도시/동네 단위 묶음
    name = models.CharField(max_length=100, unique=True)
    state = models.CharField(max_length=100, blank=True, default="")
    country = models.CharField(max_length=100, blank=True, default="")
    latitude = models.FloatField(blank=True, null=True)
    longitude = models.FloatField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name}, {self.state}" if self.state else self.name

    @property
    def is_geocoded(self):
        return self.latitude is not None and self.longitude is not None
