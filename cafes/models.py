from django.conf import settings
from django.db import models
from django.utils.text import slugify

from locations.models import Location

# cafes/new 등 고정 경로와 겹치지 않도록
RESERVED_SLUGS = {"new"}


class Cafe(models.Model):
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    address = models.CharField(max_length=500)
    description = models.TextField(blank=True, default="")
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100, blank=True, default="")
    country = models.CharField(max_length=100, blank=True, default="")
    latitude = models.FloatField(blank=True, null=True)
    longitude = models.FloatField(blank=True, null=True)

    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="cafes")
    location = models.ForeignKey(
        Location, on_delete=models.SET_NULL, blank=True, null=True, related_name="cafes"
    )
    votes_score = models.IntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.name} ({self.city})"

    @property
    def is_geocoded(self):
        return self.latitude is not None and self.longitude is not None

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = self._unique_slug()
        super().save(*args, **kwargs)

    def _unique_slug(self):
        base = slugify(self.name)[:240] or "cafe"
        slug, n = base, 2
        if slug in RESERVED_SLUGS:
            slug = f"{base}-{n}"
            n += 1
        while Cafe.objects.filter(slug=slug).exclude(pk=self.pk).exists():
            slug = f"{base}-{n}"
            n += 1
        return slug


class Comment(models.Model):
    cafe = models.ForeignKey(Cafe, on_delete=models.CASCADE, related_name="comments")
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    body = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.author} on {self.cafe.name}"


class Vote(models.Model):
    class Value(models.IntegerChoices):
        UP = 1, "Up"
        DOWN = -1, "Down"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="votes")
    cafe = models.ForeignKey(Cafe, on_delete=models.CASCADE, related_name="votes")
    value = models.SmallIntegerField(choices=Value.choices)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "cafe"], name="unique_vote_per_user_cafe"),
        ]

    def __str__(self):
        return f"{self.user} {self.get_value_display()} {self.cafe.name}"
