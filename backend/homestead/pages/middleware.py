import re

from django.conf import settings
from django.http import HttpResponseRedirect

from .site_settings import get_default_locale

# Paths served without a locale prefix
SKIP_LOCALE_PREFIXES = ("/api/", "/admin/", "/static/", "/media/", "/login", "/signup")
PUBLIC_FILE = re.compile(r"\.[^/]+$")


class LocaleRedirectMiddleware:
    """
    Redirect unlocalized page requests to ``/{default_locale}{path}``.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path_info
        if self._should_redirect(path):
            target = f"/{get_default_locale()}{path}"
            query = request.META.get("QUERY_STRING")
            if query:
                target = f"{target}?{query}"
            return HttpResponseRedirect(target)
        return self.get_response(request)

    def _should_redirect(self, path):
        if path.startswith(SKIP_LOCALE_PREFIXES) or path in ("/api", "/admin"):
            return False
        if PUBLIC_FILE.search(path):
            return False
        first = path.lstrip("/").split("/", 1)[0]
        return first not in settings.SUPPORTED_LOCALES
