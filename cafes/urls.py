from django.urls import path
from rest_framework.urlpatterns import format_suffix_patterns

from .views import CafeViewSet

app_name = "cafes"

cafe_list = CafeViewSet.as_view({"get": "list"})
cafe_new = CafeViewSet.as_view({"get": "new", "post": "create"})
cafe_detail = CafeViewSet.as_view({"get": "retrieve", "delete": "destroy"})
cafe_edit = CafeViewSet.as_view({"get": "edit", "patch": "update", "put": "update"})
cafe_upvote = CafeViewSet.as_view({"post": "upvote"})
cafe_downvote = CafeViewSet.as_view({"post": "downvote"})

urlpatterns = format_suffix_patterns(
    [
        path("cafes", cafe_list, name="cafe-list"),
        path("cafes/new", cafe_new, name="cafe-new"),
        path("cafes/<slug:slug>", cafe_detail, name="cafe-detail"),
        path("cafes/<slug:slug>/edit", cafe_edit, name="cafe-edit"),
        path("cafes/<slug:slug>/upvote", cafe_upvote, name="cafe-upvote"),
        path("cafes/<slug:slug>/downvote", cafe_downvote, name="cafe-downvote"),
    ],
    allowed=["json", "html"],
)
