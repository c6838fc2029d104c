from django.contrib import admin
from .models import Cafe, Comment, Vote
from .services import regeocode_cafe


class CommentInline(admin.TabularInline):
    model = Comment
    extra = 0


@admin.register(Cafe)
class CafeAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "state", "location", "latitude", "longitude", "votes_score", "owner", "created_at")
    list_filter = ("state", "country", "location")
    search_fields = ("name", "address", "city")
    readonly_fields = ("slug", "votes_score")
    inlines = [CommentInline]
    actions = ["regeocode"]

    def regeocode(self, request, queryset):
        updated = sum(1 for cafe in queryset if regeocode_cafe(cafe))
        self.message_user(request, f"{updated} cafe(s) geocoded.")
    regeocode.short_description = "Re-geocode selected cafes"


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ("cafe", "author", "created_at")
    search_fields = ("body", "cafe__name", "author__username")


@admin.register(Vote)
class VoteAdmin(admin.ModelAdmin):
    list_display = ("cafe", "user", "value", "updated_at")
    list_filter = ("value",)
