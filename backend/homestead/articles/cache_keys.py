from django.conf import settings


def detail_cache_key(slug: str, locale: str):
    return f"articles:detail:{locale}:{slug}"


def detail_cache_keys(slugs):
    # every locale variant of each slug
    return [detail_cache_key(slug, locale) for slug in slugs for locale in settings.SUPPORTED_LOCALES]
