from django.conf import settings

OVERRIDABLE_METHODS = {"PATCH", "PUT", "DELETE"}


class MethodOverrideMiddleware:
    """Let HTML forms reach PATCH/PUT/DELETE routes through a ``_method`` field."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.method == "POST":
            method = request.POST.get("_method", "").upper()
            if method in OVERRIDABLE_METHODS:
                request.method = method
                # CSRF 검사는 POST가 아니면 헤더에서만 토큰을 읽는다
                token = request.POST.get("csrfmiddlewaretoken")
                if token:
                    request.META.setdefault(settings.CSRF_HEADER_NAME, token)
        return self.get_response(request)
