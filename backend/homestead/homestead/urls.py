from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path, re_path

locale_pattern = "|".join(settings.SUPPORTED_LOCALES)

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("users.urls")),
    path("api/", include("articles.urls")),
    path("api/", include("pages.urls")),
    re_path(rf"^(?P<locale>{locale_pattern})/", include("pages.public_urls")),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
