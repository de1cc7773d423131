from datetime import datetime, timezone as dt_timezone

from django.core.cache import cache
from django.test import SimpleTestCase
from rest_framework.test import APITestCase

from articles.models import Article, Category
from pages.dictionaries import EN, NL
from pages.homepage import HOMEPAGE_FIELDS, default_homepage_content
from pages.i18n import count_label, get_dictionary, resolve_locale, translate
from pages.models import HomepagePreset, SiteSetting
from pages.site_settings import get_default_locale, set_default_locale
from users.models import User

BODY = "A long enough article body about soil, seeds and compost heaps."


class DictionaryTests(SimpleTestCase):
    def test_locales_share_keys(self):
        for section, values in EN.items():
            self.assertEqual(set(values), set(NL[section]), section)

    def test_resolve_and_translate(self):
        self.assertEqual(resolve_locale("nl"), "nl")
        self.assertEqual(resolve_locale("fr"), "en")
        self.assertEqual(resolve_locale(None), "en")
        self.assertEqual(translate(get_dictionary("nl"), "stories.count_plural", count=3), "3 verhalen")
        self.assertEqual(translate(get_dictionary("en"), "missing.key"), "missing.key")

    def test_count_label(self):
        self.assertEqual(count_label(get_dictionary("en"), "topics", 1), "1 story")
        self.assertEqual(count_label(get_dictionary("en"), "topics", 0), "0 stories")
        self.assertEqual(count_label(get_dictionary("nl"), "stories", 4), "4 verhalen")

    def test_flattened_defaults(self):
        content = default_homepage_content("nl")
        self.assertEqual(content["hero_title"], NL["hero"]["title"])
        self.assertIn("site_logo_url", HOMEPAGE_FIELDS)
        self.assertIn("hero_image_url", HOMEPAGE_FIELDS)


class AdminTestCase(APITestCase):
    def setUp(self):
        cache.clear()
        self.admin = User.objects.create_user(username="admin", password="S3curePass!", role="admin")
        self.client.force_authenticate(self.admin)


class HomepageApiTests(AdminTestCase):
    def test_defaults_without_record(self):
        r = self.client.get("/api/homepage/?locale=nl")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["source"], "default")
        self.assertEqual(r.data["data"]["hero_title"], NL["hero"]["title"])
        self.assertNotIn("defaults", r.data)

        r = self.client.get("/api/homepage/?locale=fr&include_defaults=true")
        self.assertEqual(r.data["locale"], "en")
        self.assertEqual(r.data["defaults"]["hero_title"], EN["hero"]["title"])

    def test_save_and_reset(self):
        r = self.client.put("/api/homepage/?locale=nl", {
            "hero_title": "Welkom op de hoeve", "hero_image_url": "https://cdn.test/hero.jpg",
        }, format="json")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["source"], "database")

        r = self.client.get("/api/homepage/?locale=nl")
        self.assertEqual(r.data["source"], "database")
        self.assertEqual(r.data["data"]["hero_title"], "Welkom op de hoeve")
        self.assertEqual(r.data["data"]["hero_image_url"], "https://cdn.test/hero.jpg")

        r = self.client.delete("/api/homepage/?locale=nl")
        self.assertEqual(r.data, {"success": True, "locale": "nl"})
        self.assertEqual(self.client.get("/api/homepage/?locale=nl").data["source"], "default")

    def test_rejects_invalid_url(self):
        r = self.client.put("/api/homepage/?locale=en", {"site_logo_url": "not a url"}, format="json")
        self.assertEqual(r.status_code, 400)
        self.assertIn("site_logo_url", r.data["errors"])

    def test_requires_admin(self):
        self.client.force_authenticate(None)
        self.assertEqual(self.client.get("/api/homepage/").status_code, 401)


class HomepagePresetTests(AdminTestCase):
    def test_locale_required(self):
        r = self.client.get("/api/homepage/presets/")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data["message"], "Invalid or missing locale.")

    def test_upsert_by_name(self):
        payload = {"locale": "en", "name": " Spring ", "data": {"hero_title": "Spring"}}
        first = self.client.post("/api/homepage/presets/", payload, format="json")
        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.data["preset"]["name"], "Spring")

        payload["data"] = {"hero_title": "Spring, revisited"}
        second = self.client.post("/api/homepage/presets/", payload, format="json")
        self.assertEqual(second.data["preset"]["id"], first.data["preset"]["id"])
        self.assertEqual(HomepagePreset.objects.get().data["hero_title"], "Spring, revisited")

        r = self.client.get("/api/homepage/presets/?locale=en")
        self.assertEqual(len(r.data["presets"]), 1)
        self.assertEqual(self.client.get("/api/homepage/presets/?locale=nl").data["presets"], [])

    def test_unsupported_locale(self):
        r = self.client.post("/api/homepage/presets/", {"locale": "fr", "name": "x", "data": {}}, format="json")
        self.assertEqual(r.status_code, 400)
        self.assertIn("locale", r.data["errors"])

    def test_delete(self):
        preset = HomepagePreset.objects.create(locale="en", name="Winter", data={})
        r = self.client.delete(f"/api/homepage/presets/{preset.id}/")
        self.assertEqual(r.data, {"success": True})

        r = self.client.delete(f"/api/homepage/presets/{preset.id}/")
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.data["message"], "Preset not found.")


class DefaultLocaleTests(AdminTestCase):
    def test_get_and_set(self):
        self.client.force_authenticate(None)
        self.assertEqual(self.client.get("/api/settings/default-locale/").data, {"locale": "en"})
        r = self.client.put("/api/settings/default-locale/", {"locale": "nl"}, format="json")
        self.assertEqual(r.status_code, 401)

        self.client.force_authenticate(self.admin)
        r = self.client.put("/api/settings/default-locale/", {"locale": "nl"}, format="json")
        self.assertEqual(r.data, {"locale": "nl"})
        self.assertEqual(self.client.get("/api/settings/default-locale/").data, {"locale": "nl"})

    def test_unsupported_locale(self):
        r = self.client.put("/api/settings/default-locale/", {"locale": "fr"}, format="json")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data["message"], "Unsupported locale.")

    def test_value_is_cached(self):
        set_default_locale("nl")
        SiteSetting.objects.filter(key="default_locale").update(value="en")
        self.assertEqual(get_default_locale(), "nl")
        self.assertEqual(get_default_locale(force_refresh=True), "en")

    def test_unknown_stored_value_falls_back(self):
        SiteSetting.objects.create(key="default_locale", value="de")
        self.assertEqual(get_default_locale(), "en")


class LocaleRedirectTests(APITestCase):
    def setUp(self):
        cache.clear()

    def test_redirects_to_default_locale(self):
        r = self.client.get("/")
        self.assertEqual(r.status_code, 302)
        self.assertEqual(r["Location"], "/en/")

        set_default_locale("nl")
        r = self.client.get("/articles/some-story/?ref=mail")
        self.assertEqual(r["Location"], "/nl/articles/some-story/?ref=mail")

    def test_exempt_paths(self):
        self.assertEqual(self.client.get("/api/settings/default-locale/").status_code, 200)
        self.assertNotEqual(self.client.get("/favicon.ico").status_code, 302)
        self.assertNotEqual(self.client.get("/login").status_code, 302)
        self.assertNotEqual(self.client.get("/signup/some-token").status_code, 302)


class LocalePageTests(APITestCase):
    def setUp(self):
        cache.clear()
        self.category = Category.objects.create(name="Garden Planning", color="#65a30d")
        self.article = Article.objects.create(
            title="Four Season Garden", slug="four-season-garden", content=BODY, published=True,
            published_at=datetime(2024, 3, 18, 12, 0, tzinfo=dt_timezone.utc),
        )
        self.article.categories.add(self.category)
        Article.objects.create(title="Draft Notes", slug="draft-notes", content=BODY).categories.add(self.category)

    def test_home(self):
        r = self.client.get("/nl/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["content"]["hero_title"], NL["hero"]["title"])
        self.assertEqual([a["slug"] for a in r.data["articles"]], ["four-season-garden"])
        self.assertEqual(r.data["categories"][0]["article_count"], 1)
        self.assertEqual(r.data["categories"][0]["article_count_label"], "1 verhaal")
        self.assertEqual(r.data["article_count_label"], "1 verhaal")

        Article.objects.create(title="Winter Greens", content=BODY, published=True)
        self.assertEqual(self.client.get("/en/").data["article_count_label"], "2 stories")

    def test_article(self):
        r = self.client.get("/nl/articles/four-season-garden/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["formatted_date"], "18 maart 2024")
        self.assertEqual(r.data["categories"][0]["slug"], "garden-planning")

        self.assertEqual(self.client.get("/en/articles/draft-notes/").status_code, 404)

    def test_category(self):
        r = self.client.get("/en/categories/garden-planning/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["category"]["name"], "Garden Planning")
        self.assertEqual([a["title"] for a in r.data["articles"]], ["Four Season Garden"])

        self.assertEqual(self.client.get("/en/categories/unknown/").status_code, 404)
