from django.contrib import admin
from .models import Category, Article, MediaAsset

# Register your models here.
@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'color']
    prepopulated_fields = {'slug': ('name',)}
    search_fields = ['name', 'description']

@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    list_display = ['title', 'slug', 'published', 'published_at', 'updated_at']
    list_filter = ['published', 'categories', 'published_at']
    prepopulated_fields = {'slug': ('title',)}
    search_fields = ['title', 'excerpt', 'content']
    filter_horizontal = ['categories']
    readonly_fields = ['created_at', 'updated_at']
    actions = ['make_published', 'make_draft']

    def make_published(self, request, queryset):
        # save() per row so published_at is stamped and caches are purged
        for article in queryset.filter(published=False):
            article.apply_publication(True)
            article.save()
    make_published.short_description = "Publish selected articles"

    def make_draft(self, request, queryset):
        for article in queryset.filter(published=True):
            article.apply_publication(False)
            article.save()
    make_draft.short_description = "Unpublish selected articles"

@admin.register(MediaAsset)
class MediaAssetAdmin(admin.ModelAdmin):
    list_display = ['file_url', 'uploader', 'mime_type', 'size', 'created_at']
    search_fields = ['file_url', 'uploader__username']
