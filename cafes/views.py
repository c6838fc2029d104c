from django.conf import settings
from django.contrib import messages
from django.contrib.auth.views import redirect_to_login
from django.http import Http404
from django.shortcuts import redirect
from django.utils.http import url_has_allowed_host_and_scheme
from rest_framework import permissions, status, viewsets
from rest_framework.exceptions import NotAuthenticated, NotFound, PermissionDenied
from rest_framework.renderers import JSONRenderer, TemplateHTMLRenderer
from rest_framework.response import Response

from . import services
from .geojson import cafes_to_features
from .models import Vote
from .permissions import IsCafeOwner
from .serializers import (
    CafeDetailSerializer,
    CafeSerializer,
    error_messages,
)

NOT_FOUND_MESSAGE = "Sorry, that cafe does not exist"


class CafeViewSet(viewsets.ViewSet):
    renderer_classes = [TemplateHTMLRenderer, JSONRenderer]
    lookup_field = "slug"

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            return [permissions.AllowAny()]
        if self.action in ("edit", "update", "destroy"):
            return [permissions.IsAuthenticated(), IsCafeOwner()]
        return [permissions.IsAuthenticated()]

    def _is_html(self):
        renderer = getattr(self.request, "accepted_renderer", None)
        return renderer is None or renderer.format == "html"

    def _api_response(self, status_str, message, code, data):
        return Response(
            {
                "status": status_str,
                "message": message,
                "code": code,
                "data": data,
            },
            status=code,
        )

    def _flash_warnings(self, request, warnings):
        for warning in warnings:
            messages.warning(request, warning)

    def handle_exception(self, exc):
        if isinstance(exc, Http404):
            exc = NotFound(NOT_FOUND_MESSAGE)

        if self._is_html():
            if isinstance(exc, NotFound):
                messages.info(self.request, NOT_FOUND_MESSAGE)
                return redirect("cafes:cafe-list")
            if isinstance(exc, NotAuthenticated):
                return redirect_to_login(self.request.get_full_path(), settings.LOGIN_URL)
            if isinstance(exc, PermissionDenied) and "slug" in self.kwargs:
                messages.error(self.request, str(exc.detail))
                return redirect("cafes:cafe-detail", slug=self.kwargs["slug"])
        elif isinstance(exc, NotFound):
            return self._api_response("error", str(exc.detail), status.HTTP_404_NOT_FOUND, {})

        return super().handle_exception(exc)

    def _get_cafe(self, slug):
        cafe = services.find_cafe(slug)
        self.check_object_permissions(self.request, cafe)
        return cafe

    def list(self, request, format=None):
        search = request.query_params.get("search", "").strip()
        page_number = request.query_params.get("page", 1)

        location = None
        if search:
            page, location = services.search_cafes(search, page_number)
        else:
            page = services.list_cafes(page_number)

        cafes = list(page.object_list)
        if not self._is_html():
            return Response(cafes_to_features(cafes))

        return Response(
            {
                "cafes": cafes,
                "page": page,
                "search": search,
                "location": location,
            },
            template_name="cafes/index.html",
        )

    def retrieve(self, request, slug=None, format=None):
        cafe = self._get_cafe(slug)
        nearbys = services.nearby_cafes(cafe)

        if not self._is_html():
            return Response(cafes_to_features([cafe] + [item["cafe"] for item in nearbys]))

        comments = cafe.comments.select_related("author")
        user_vote = None
        if request.user.is_authenticated:
            user_vote = Vote.objects.filter(cafe=cafe, user=request.user).values_list("value", flat=True).first()

        return Response(
            {
                "cafe": cafe,
                "comments": comments,
                "nearbys": nearbys,
                "user_vote": user_vote,
            },
            template_name="cafes/show.html",
        )

    def new(self, request, format=None):
        initial = {"country": settings.CAFES_DEFAULT_COUNTRY}
        if not self._is_html():
            return Response(initial)
        return Response({"cafe": initial, "errors": []}, template_name="cafes/new.html")

    def create(self, request, format=None):
        serializer = CafeSerializer(data=request.data)
        if not serializer.is_valid():
            if self._is_html():
                return Response(
                    {"cafe": request.data, "errors": error_messages(serializer.errors)},
                    template_name="cafes/new.html",
                    status=status.HTTP_400_BAD_REQUEST,
                )
            return self._api_response("error", "Invalid cafe", status.HTTP_400_BAD_REQUEST, serializer.errors)

        result = services.create_cafe(request.user, serializer.validated_data)
        cafe = result.cafe

        if not self._is_html():
            data = CafeDetailSerializer(cafe).data
            data["warnings"] = result.warnings
            return self._api_response(
                "success", f"Cafe {cafe.name} added successfully.", status.HTTP_201_CREATED, data
            )

        messages.success(request, f"Cafe {cafe.name} added successfully.")
        self._flash_warnings(request, result.warnings)
        return redirect("cafes:cafe-detail", slug=cafe.slug)

    def edit(self, request, slug=None, format=None):
        cafe = self._get_cafe(slug)
        if not self._is_html():
            return Response(CafeSerializer(cafe).data)
        return Response({"cafe": cafe, "slug": cafe.slug, "errors": []}, template_name="cafes/edit.html")

    def update(self, request, slug=None, format=None):
        cafe = self._get_cafe(slug)
        serializer = CafeSerializer(cafe, data=request.data, partial=True)
        if not serializer.is_valid():
            if self._is_html():
                return Response(
                    {"cafe": request.data, "slug": cafe.slug, "errors": error_messages(serializer.errors)},
                    template_name="cafes/edit.html",
                    status=status.HTTP_400_BAD_REQUEST,
                )
            return self._api_response("error", "Invalid cafe", status.HTTP_400_BAD_REQUEST, serializer.errors)

        result = services.update_cafe(cafe, serializer.validated_data)
        cafe = result.cafe

        if not self._is_html():
            data = CafeDetailSerializer(cafe).data
            data["warnings"] = result.warnings
            return self._api_response("success", f"Cafe {cafe.name} updated successfully.", status.HTTP_200_OK, data)

        self._flash_warnings(request, result.warnings)
        return redirect("cafes:cafe-detail", slug=cafe.slug)

    def destroy(self, request, slug=None, format=None):
        cafe = self._get_cafe(slug)
        name = cafe.name
        services.delete_cafe(cafe)

        if not self._is_html():
            return self._api_response("success", f"Cafe {name} deleted successfully.", status.HTTP_200_OK, {})

        messages.success(request, f"Cafe {name} deleted successfully.")
        return redirect("root")

    def _vote(self, request, slug, value):
        cafe = services.cast_vote(self._get_cafe(slug), request.user, value)

        if not self._is_html():
            return self._api_response(
                "success", "Vote recorded", status.HTTP_200_OK, {"slug": cafe.slug, "votes_score": cafe.votes_score}
            )

        referer = request.META.get("HTTP_REFERER")
        if referer and url_has_allowed_host_and_scheme(
            referer, allowed_hosts={request.get_host()}, require_https=request.is_secure()
        ):
            return redirect(referer)
        return redirect("cafes:cafe-detail", slug=cafe.slug)

    def upvote(self, request, slug=None, format=None):
        return self._vote(request, slug, Vote.Value.UP)

    def downvote(self, request, slug=None, format=None):
        return self._vote(request, slug, Vote.Value.DOWN)

