import logging
import uuid

from django.conf import settings
from django.core.cache import cache
from django.core.files.storage import default_storage
from django.db.models import Count
from rest_framework import mixins, status, views, viewsets
from rest_framework.decorators import action
from rest_framework.generics import get_object_or_404
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from homestead.exceptions import ConflictError, PayloadTooLarge
from pages.i18n import format_date, resolve_locale
from users.permissions import IsAdminRole, IsAdminRoleOrReadOnly, is_admin
from .cache_keys import detail_cache_key
from .models import Article, Category, MediaAsset
from .search import MIN_QUERY_LENGTH, PUBLIC_LIMIT, search_admin_entities, search_public_content
from .serializers import (
    ArticleSerializer, ArticleWriteSerializer, CategorySerializer, CategoryWriteSerializer,
)
from .text import collapse_whitespace

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_COLOR = "#047857"
DETAIL_CACHE_TIMEOUT = 60 * 60


def public_article_payload(article, locale):
    categories = list(article.categories.all())
    primary = categories[0] if categories else None
    excerpt = article.excerpt if article.excerpt and article.excerpt.strip() else article.content[:200]
    return {
        "id": str(article.id),
        "slug": article.slug,
        "title": article.title,
        "content": article.content,
        "excerpt": excerpt,
        "category_color": (primary.color if primary and primary.color else DEFAULT_CATEGORY_COLOR),
        "category_label": " · ".join(c.name for c in categories) if categories else None,
        "formatted_date": format_date(article.published_at or article.created_at, locale),
    }


class ArticleViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAdminRoleOrReadOnly]
    http_method_names = ["get", "post", "put", "delete"]

    def get_queryset(self):
        qs = Article.objects.all().prefetch_related("categories").order_by("-created_at")
        # non-admins only ever see published articles
        if not is_admin(self.request.user):
            qs = qs.published()
        return qs

    def get_serializer_class(self):
        return ArticleWriteSerializer if self.action in ["create", "update"] else ArticleSerializer

    def create(self, request, *args, **kwargs):
        ser = ArticleWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        article = ser.save()
        logger.info("%s created article %s", request.user.username, article.slug)
        return Response(ArticleSerializer(article).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        ser = ArticleWriteSerializer(self.get_object(), data=request.data)
        ser.is_valid(raise_exception=True)
        article = ser.save()
        return Response(ArticleSerializer(article).data)

    def destroy(self, request, *args, **kwargs):
        article = self.get_object()
        article.delete()
        logger.info("%s deleted article %s", request.user.username, article.slug)
        return Response({"success": True})

    @action(detail=False, methods=["get"], url_path=r"by-slug/(?P<slug>[^/]+)", permission_classes=[AllowAny])
    def by_slug(self, request, slug=None):
        locale = resolve_locale(request.GET.get("locale"))
        key = detail_cache_key(slug, locale)
        data = cache.get(key)
        if not data:
            article = get_object_or_404(Article.objects.published().prefetch_related("categories"), slug=slug)
            data = public_article_payload(article, locale)
            cache.set(key, data, DETAIL_CACHE_TIMEOUT)
        return Response(data)


class CategoryViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    permission_classes = [IsAdminRoleOrReadOnly]
    serializer_class = CategorySerializer
    http_method_names = ["get", "post", "put", "delete"]

    def get_queryset(self):
        return Category.objects.annotate(article_count=Count("articles")).order_by("name")

    def create(self, request, *args, **kwargs):
        ser = CategoryWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        category = ser.save()
        return Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        ser = CategoryWriteSerializer(self.get_object(), data=request.data)
        ser.is_valid(raise_exception=True)
        category = ser.save()
        return Response(CategorySerializer(category).data)

    def destroy(self, request, *args, **kwargs):
        category = self.get_object()
        if category.articles.exists():
            raise ConflictError(
                "Cannot delete category that is linked to existing articles. Remove the associations first."
            )
        category.delete()
        return Response({"success": True})


class SearchView(views.APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        query = (request.GET.get("q") or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return Response({"articles": [], "categories": [], "minimum_characters": MIN_QUERY_LENGTH})
        results = search_public_content(
            query,
            include_articles=request.GET.get("articles") != "0",
            include_categories=request.GET.get("categories") != "0",
            limit=request.GET.get("limit") or PUBLIC_LIMIT,
        )
        return Response(results)


class AdminSearchView(views.APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        query = collapse_whitespace(request.GET.get("q")) or ""
        results = search_admin_entities(query)
        results["minimum_characters"] = MIN_QUERY_LENGTH
        return Response(results)


class UploadView(views.APIView):
    permission_classes = [IsAdminRole]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        upload = request.FILES.get("file")
        if upload is None:
            return Response({"message": "No file uploaded."}, status=status.HTTP_400_BAD_REQUEST)

        extension = settings.UPLOAD_ALLOWED_TYPES.get(upload.content_type)
        if extension is None:
            return Response({"message": "Unsupported file type."}, status=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE)
        if upload.size > settings.UPLOAD_MAX_BYTES:
            raise PayloadTooLarge()

        name = default_storage.save(f"uploads/{uuid.uuid4()}{extension}", upload)
        url = default_storage.url(name)
        MediaAsset.objects.create(uploader=request.user, file_url=url, mime_type=upload.content_type, size=upload.size)
        logger.info("%s uploaded %s (%d bytes)", request.user.username, name, upload.size)
        return Response({"url": url}, status=status.HTTP_201_CREATED)
