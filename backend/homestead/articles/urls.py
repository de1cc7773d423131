from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    ArticleViewSet, CategoryViewSet, SearchView, AdminSearchView, UploadView
)


router = DefaultRouter()
router.register("articles", ArticleViewSet, basename="articles")
router.register("categories", CategoryViewSet, basename="categories")

urlpatterns = [
    path("search/", SearchView.as_view(), name="search"),
    path("admin/search/", AdminSearchView.as_view(), name="admin-search"),
    path("uploads/", UploadView.as_view(), name="uploads"),
    path("", include(router.urls)),
]
