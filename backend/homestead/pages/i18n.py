import re

from django.conf import settings
from django.utils import dateformat, timezone, translation

from .dictionaries import DICTIONARIES

DATE_FORMATS = {
    "en": "F j, Y",
    "nl": "j F Y",
}
LOCALE_LABELS = {
    "en": {"label": "English", "short": "EN"},
    "nl": {"label": "Nederlands", "short": "NL"},
}

_PLACEHOLDER = re.compile(r"{{(.*?)}}")


def is_supported_locale(value):
    return isinstance(value, str) and value in settings.SUPPORTED_LOCALES


def resolve_locale(value, default=None):
    if is_supported_locale(value):
        return value
    return default or settings.FALLBACK_LOCALE


def get_dictionary(locale):
    return DICTIONARIES.get(locale) or DICTIONARIES[settings.FALLBACK_LOCALE]


def translate(dictionary, path, **variables):
    """
    Look up a dotted ``path`` and fill ``{{name}}`` placeholders; unknown
    paths come back unchanged.
    """
    value = dictionary
    for key in path.split("."):
        if not isinstance(value, dict) or key not in value:
            return path
        value = value[key]
    if not isinstance(value, str):
        return path
    return _PLACEHOLDER.sub(lambda m: str(variables.get(m.group(1).strip(), "")), value)


def count_label(dictionary, section, count):
    key = "count_singular" if count == 1 else "count_plural"
    return translate(dictionary, f"{section}.{key}", count=count)


def format_date(value, locale):
    if value is None:
        return None
    locale = resolve_locale(locale)
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    with translation.override(locale):
        return dateformat.format(value, DATE_FORMATS[locale])


def locale_label(locale):
    return LOCALE_LABELS.get(locale, LOCALE_LABELS[settings.FALLBACK_LOCALE])
