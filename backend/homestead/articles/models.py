import uuid
from django.conf import settings
from django.core.validators import MinLengthValidator, RegexValidator
from django.db import models
from django.utils import timezone

from .text import slugify_text, unique_slug

SLUG_VALIDATOR = RegexValidator(
    r"^[a-z0-9]+(?:-[a-z0-9]+)*$",
    "Slug can only contain lowercase letters, numbers, and hyphens",
)
COLOR_VALIDATOR = RegexValidator(r"^#([0-9a-fA-F]{3}){1,2}$", "Color must be a valid hex code")


class BaseModel(models.Model):
    """
    An abstract base class model that provides common fields.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Category(BaseModel):
    """
    Model for article categories.
    """
    name = models.CharField(max_length=120, unique=True, validators=[MinLengthValidator(2)])
    slug = models.SlugField(unique=True, max_length=80, validators=[SLUG_VALIDATOR])
    color = models.CharField(max_length=7, blank=True, null=True, validators=[COLOR_VALIDATOR])
    description = models.TextField(blank=True, null=True)

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify_text(self.name)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name

    class Meta:
        ordering = ['name']
        verbose_name_plural = "Categories"


class ArticleQuerySet(models.QuerySet):
    def published(self):
        return self.filter(published=True)


class Article(BaseModel):
    """
    Markdown article; ``published_at`` is only set while ``published`` is true.
    """
    MAX_CATEGORIES = 6

    title = models.CharField(max_length=255, db_index=True, validators=[MinLengthValidator(3)])
    slug = models.SlugField(unique=True, max_length=80, db_index=True, validators=[SLUG_VALIDATOR])
    excerpt = models.CharField(max_length=260, blank=True, default="")
    content = models.TextField()  # Markdown source
    published = models.BooleanField(default=False)
    published_at = models.DateTimeField(null=True, blank=True)
    categories = models.ManyToManyField(Category, related_name='articles', blank=True)

    objects = ArticleQuerySet.as_manager()

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Article, self.title, fallback="article")
        self.apply_publication(self.published, self.published_at)
        super().save(*args, **kwargs)

    def apply_publication(self, published, published_at=None):
        self.published = published
        if not published:
            self.published_at = None
        elif published_at is None:
            self.published_at = timezone.now()
        else:
            self.published_at = published_at

    def __str__(self):
        return self.title

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['published', 'published_at'], name='article_published_idx'),
        ]


class MediaAsset(BaseModel):
    """
    Model to track files uploaded from the article editor.
    """
    uploader = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='media_assets'
    )
    file_url = models.CharField(max_length=500)
    mime_type = models.CharField(max_length=100)
    size = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.file_url} uploaded by {self.uploader}"
