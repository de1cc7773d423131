from .dictionaries import EN
from .i18n import get_dictionary
from .models import HomepageContent

URL_FIELDS = ("site_logo_url", "hero_image_url")


def _flatten(dictionary):
    return {
        f"{section}_{key}": value
        for section, values in dictionary.items()
        for key, value in values.items()
    }


HOMEPAGE_FIELDS = tuple(_flatten(EN).keys())


def default_homepage_content(locale):
    return _flatten(get_dictionary(locale))


def get_homepage_content_state(locale):
    defaults = default_homepage_content(locale)
    record = HomepageContent.objects.filter(locale=locale).first()
    if record is None:
        return {"data": defaults, "defaults": defaults, "source": "default"}

    data = dict(defaults)
    data.update({k: v for k, v in record.data.items() if k in defaults})
    return {"data": data, "defaults": defaults, "source": "database"}


def get_homepage_content(locale):
    return get_homepage_content_state(locale)["data"]


def save_homepage_content(locale, data):
    record, _ = HomepageContent.objects.update_or_create(locale=locale, defaults={"data": data})
    return record


def reset_homepage_content(locale):
    deleted, _ = HomepageContent.objects.filter(locale=locale).delete()
    return deleted > 0
