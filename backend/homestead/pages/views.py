# pages/views.py
import logging

from django.db.models import Count, Q
from rest_framework import permissions, status, views
from rest_framework.generics import get_object_or_404
from rest_framework.response import Response

from articles.models import Article, Category
from articles.serializers import CategoryMiniSerializer
from articles.views import public_article_payload
from users.permissions import IsAdminRole
from .homepage import get_homepage_content, get_homepage_content_state, reset_homepage_content, save_homepage_content
from .i18n import count_label, format_date, get_dictionary, is_supported_locale, locale_label, resolve_locale
from .models import HomepagePreset
from .serializers import (
    HomepageContentSerializer, HomepagePresetSerializer, HomepagePresetWriteSerializer,
)
from .site_settings import get_default_locale, set_default_locale

logger = logging.getLogger(__name__)

LATEST_ARTICLES_LIMIT = 12


class HomepageView(views.APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        locale = resolve_locale(request.GET.get("locale"))
        state = get_homepage_content_state(locale)
        payload = {"locale": locale, "data": state["data"], "source": state["source"]}
        if request.GET.get("include_defaults") == "true":
            payload["defaults"] = state["defaults"]
        return Response(payload)

    def put(self, request):
        locale = resolve_locale(request.GET.get("locale"))
        ser = HomepageContentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        save_homepage_content(locale, data)
        logger.info("%s updated homepage content for %s", request.user.username, locale)
        return Response({"locale": locale, "data": data, "source": "database"})

    def delete(self, request):
        locale = resolve_locale(request.GET.get("locale"))
        reset_homepage_content(locale)
        return Response({"success": True, "locale": locale})


class HomepagePresetListView(views.APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        locale = request.GET.get("locale")
        if not is_supported_locale(locale):
            return Response({"message": "Invalid or missing locale."}, status=status.HTTP_400_BAD_REQUEST)
        presets = HomepagePreset.objects.filter(locale=locale).order_by("-updated_at")
        return Response({"presets": HomepagePresetSerializer(presets, many=True).data})

    def post(self, request):
        ser = HomepagePresetWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        preset = ser.save()
        return Response({"preset": HomepagePresetSerializer(preset).data})


class HomepagePresetDetailView(views.APIView):
    permission_classes = [IsAdminRole]

    def delete(self, request, pk):
        preset = HomepagePreset.objects.filter(pk=pk).first()
        if preset is None:
            return Response({"message": "Preset not found."}, status=status.HTTP_404_NOT_FOUND)
        preset.delete()
        return Response({"success": True})


class DefaultLocaleView(views.APIView):

    def get_permissions(self):
        if self.request.method == "GET":
            return [permissions.AllowAny()]
        return [IsAdminRole()]

    def get(self, request):
        return Response({"locale": get_default_locale()})

    def put(self, request):
        locale = request.data.get("locale")
        if not is_supported_locale(locale):
            return Response({"message": "Unsupported locale."}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"locale": set_default_locale(locale)})


def _published_categories():
    return Category.objects.annotate(
        article_count=Count("articles", filter=Q(articles__published=True))
    ).order_by("name")


class LocaleHomeView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request, locale):
        dictionary = get_dictionary(locale)
        articles = Article.objects.published().prefetch_related("categories").order_by("-published_at")
        categories = [
            dict(
                CategoryMiniSerializer(c).data,
                article_count=c.article_count,
                article_count_label=count_label(dictionary, "topics", c.article_count),
            )
            for c in _published_categories()
        ]
        return Response({
            "locale": locale,
            "language": locale_label(locale),
            "content": get_homepage_content(locale),
            "categories": categories,
            "article_count_label": count_label(dictionary, "stories", articles.count()),
            "articles": [public_article_payload(a, locale) for a in articles[:LATEST_ARTICLES_LIMIT]],
        })


class LocaleArticleView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request, locale, slug):
        article = get_object_or_404(Article.objects.published().prefetch_related("categories"), slug=slug)
        payload = public_article_payload(article, locale)
        payload["updated_date"] = format_date(article.updated_at, locale)
        payload["categories"] = CategoryMiniSerializer(article.categories.all(), many=True).data
        return Response(payload)


class LocaleCategoryView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request, locale, slug):
        category = get_object_or_404(Category, slug=slug)
        articles = category.articles.published().prefetch_related("categories").order_by("-published_at")
        return Response({
            "locale": locale,
            "category": dict(CategoryMiniSerializer(category).data, description=category.description),
            "articles": [public_article_payload(a, locale) for a in articles],
        })
