import logging

from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError

from .i18n import resolve_locale
from .models import SiteSetting

logger = logging.getLogger(__name__)

DEFAULT_LOCALE_KEY = "default_locale"
DEFAULT_LOCALE_CACHE_KEY = "settings:default_locale"


def _load_default_locale():
    try:
        value = SiteSetting.objects.filter(key=DEFAULT_LOCALE_KEY).values_list("value", flat=True).first()
    except DatabaseError:
        logger.exception("Failed to load default locale")
        return settings.FALLBACK_LOCALE
    return resolve_locale(value)


def get_default_locale(force_refresh=False):
    if not force_refresh:
        cached = cache.get(DEFAULT_LOCALE_CACHE_KEY)
        if cached:
            return cached
    locale = _load_default_locale()
    cache.set(DEFAULT_LOCALE_CACHE_KEY, locale, settings.DEFAULT_LOCALE_CACHE_TIMEOUT)
    return locale


def set_default_locale(locale):
    SiteSetting.objects.update_or_create(key=DEFAULT_LOCALE_KEY, defaults={"value": locale})
    cache.set(DEFAULT_LOCALE_CACHE_KEY, locale, settings.DEFAULT_LOCALE_CACHE_TIMEOUT)
    logger.info("Default locale set to %s", locale)
    return locale


def clear_default_locale_cache():
    cache.delete(DEFAULT_LOCALE_CACHE_KEY)
