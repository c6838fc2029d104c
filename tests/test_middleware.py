from django.test import RequestFactory

from cafes.middleware import MethodOverrideMiddleware


def _run(request):
    seen = {}

    def get_response(req):
        seen["method"] = req.method
        seen["csrf"] = req.META.get("HTTP_X_CSRFTOKEN")
        return None

    MethodOverrideMiddleware(get_response)(request)
    return seen


def test_post_with_method_field_is_overridden():
    request = RequestFactory().post("/cafes/x/edit", {"_method": "patch", "csrfmiddlewaretoken": "tok"})

    seen = _run(request)

    assert seen == {"method": "PATCH", "csrf": "tok"}


def test_unknown_override_is_ignored():
    request = RequestFactory().post("/cafes/new", {"_method": "TRACE"})

    assert _run(request)["method"] == "POST"


def test_get_is_untouched():
    request = RequestFactory().get("/cafes", {"_method": "DELETE"})

    assert _run(request)["method"] == "GET"
