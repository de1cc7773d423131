from django.urls import path

from .views import (
    HomepageView, HomepagePresetListView, HomepagePresetDetailView, DefaultLocaleView,
)

urlpatterns = [
    path("homepage/", HomepageView.as_view(), name="homepage"),
    path("homepage/presets/", HomepagePresetListView.as_view(), name="homepage-presets"),
    path("homepage/presets/<uuid:pk>/", HomepagePresetDetailView.as_view(), name="homepage-preset-detail"),
    path("settings/default-locale/", DefaultLocaleView.as_view(), name="default-locale"),
]
