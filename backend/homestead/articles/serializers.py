import re

from django.db import transaction
from rest_framework import serializers

from homestead.exceptions import ConflictError
from homestead.fields import OptionalDateTimeField
from .models import Article, Category
from .text import slugify_text, unique_slug

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
COLOR_PATTERN = re.compile(r"^#([0-9a-fA-F]{3}){1,2}$")


def _check_slug(slug, min_length):
    if len(slug) < min_length:
        raise serializers.ValidationError({"slug": [f"Slug must be at least {min_length} characters"]})
    if not SLUG_PATTERN.match(slug):
        raise serializers.ValidationError(
            {"slug": ["Slug can only contain lowercase letters, numbers, and hyphens"]}
        )


class CategoryMiniSerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ("id", "name", "slug", "color")


class CategorySerializer(serializers.ModelSerializer):
    article_count = serializers.SerializerMethodField()

    def get_article_count(self, obj):
        count = getattr(obj, "article_count", None)
        return count if count is not None else obj.articles.count()

    class Meta:
        model = Category
        fields = ("id", "name", "slug", "color", "description", "article_count", "created_at", "updated_at")


class CategoryWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120, min_length=2, error_messages={
        "min_length": "Category name must be at least 2 characters",
    })
    slug = serializers.CharField(max_length=120, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    color = serializers.CharField(max_length=7, required=False, allow_blank=True, allow_null=True)

    def validate_color(self, value):
        if not value:
            return None
        if not COLOR_PATTERN.match(value):
            raise serializers.ValidationError("Color must be a valid hex code")
        return value

    def validate_description(self, value):
        return value.strip() or None if value else None

    def validate(self, attrs):
        attrs["slug"] = slugify_text(attrs.get("slug") or attrs["name"])
        _check_slug(attrs["slug"], 2)
        return attrs

    def _check_unique(self, attrs, instance=None):
        clash = Category.objects.filter(name=attrs["name"]) | Category.objects.filter(slug=attrs["slug"])
        if instance is not None:
            clash = clash.exclude(pk=instance.pk)
        if clash.exists():
            raise ConflictError("A category with that name or slug already exists.")

    def create(self, validated_data):
        self._check_unique(validated_data)
        return Category.objects.create(**validated_data)

    def update(self, instance, validated_data):
        self._check_unique(validated_data, instance)
        for key, value in validated_data.items():
            setattr(instance, key, value)
        instance.save()
        return instance


class ArticleSerializer(serializers.ModelSerializer):
    categories = CategoryMiniSerializer(read_only=True, many=True)

    class Meta:
        model = Article
        fields = (
            "id", "title", "slug", "excerpt", "content", "published", "published_at",
            "categories", "created_at", "updated_at",
        )


class ArticleWriteSerializer(serializers.Serializer):
    """
    Create/update payload. On create an absent slug becomes a unique slug
    derived from the title; on update it is re-derived from the title.
    """
    title = serializers.CharField(max_length=255, min_length=3, error_messages={
        "min_length": "Title must be at least 3 characters",
    })
    slug = serializers.CharField(max_length=255, required=False, allow_blank=True)
    excerpt = serializers.CharField(max_length=260, required=False, allow_blank=True, allow_null=True, error_messages={
        "max_length": "Excerpt must be 260 characters or less",
    })
    content = serializers.CharField(min_length=20, trim_whitespace=True, error_messages={
        "min_length": "Content must be at least 20 characters",
    })
    published = serializers.BooleanField(default=False)
    published_at = OptionalDateTimeField(error_messages={
        "invalid": "Publish date must be a valid date and time",
    })
    category_ids = serializers.ListField(
        child=serializers.UUIDField(), required=False, default=list,
        max_length=Article.MAX_CATEGORIES,
        error_messages={"max_length": f"Select up to {Article.MAX_CATEGORIES} categories"},
    )

    def validate_category_ids(self, value):
        ids = list(dict.fromkeys(value))
        found = set(Category.objects.filter(id__in=ids).values_list("id", flat=True))
        missing = [str(i) for i in ids if i not in found]
        if missing:
            raise serializers.ValidationError(f"Unknown categories: {', '.join(missing)}")
        return ids

    def validate(self, attrs):
        slug = (attrs.get("slug") or "").strip()
        if slug or self.instance is not None:
            attrs["slug"] = slugify_text(slug or attrs["title"])
            _check_slug(attrs["slug"], 3)
        else:
            attrs.pop("slug", None)
        if not attrs["published"]:
            attrs["published_at"] = None
        attrs["excerpt"] = (attrs.get("excerpt") or "").strip()
        return attrs

    def _check_unique_slug(self, slug, instance=None):
        qs = Article.objects.filter(slug=slug)
        if instance is not None:
            qs = qs.exclude(pk=instance.pk)
        if qs.exists():
            raise ConflictError("An article with that slug already exists.")

    @transaction.atomic
    def create(self, validated_data):
        category_ids = validated_data.pop("category_ids")
        published = validated_data.pop("published")
        published_at = validated_data.pop("published_at", None)
        if "slug" in validated_data:
            self._check_unique_slug(validated_data["slug"])
        else:
            validated_data["slug"] = unique_slug(Article, validated_data["title"], fallback="article")

        article = Article(**validated_data)
        article.apply_publication(published, published_at)
        article.save()
        article.categories.set(category_ids)
        return article

    @transaction.atomic
    def update(self, instance, validated_data):
        category_ids = validated_data.pop("category_ids")
        published = validated_data.pop("published")
        published_at = validated_data.pop("published_at", None)
        self._check_unique_slug(validated_data["slug"], instance)

        for key, value in validated_data.items():
            setattr(instance, key, value)
        instance.apply_publication(published, published_at)
        instance.save()
        instance.categories.set(category_ids)
        return instance
