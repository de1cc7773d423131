from django.urls import path

from .views import LocaleHomeView, LocaleArticleView, LocaleCategoryView

urlpatterns = [
    path("", LocaleHomeView.as_view(), name="locale-home"),
    path("articles/<slug:slug>/", LocaleArticleView.as_view(), name="locale-article"),
    path("categories/<slug:slug>/", LocaleCategoryView.as_view(), name="locale-category"),
]
