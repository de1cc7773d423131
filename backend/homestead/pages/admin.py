from django.contrib import admin

from .models import HomepageContent, HomepagePreset, SiteSetting
from .site_settings import clear_default_locale_cache


@admin.register(HomepageContent)
class HomepageContentAdmin(admin.ModelAdmin):
    list_display = ("locale", "updated_at")


@admin.register(HomepagePreset)
class HomepagePresetAdmin(admin.ModelAdmin):
    list_display = ("name", "locale", "updated_at")
    list_filter = ("locale",)
    search_fields = ("name",)


@admin.register(SiteSetting)
class SiteSettingAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "updated_at")

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        clear_default_locale_cache()
