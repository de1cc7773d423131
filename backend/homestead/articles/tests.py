import shutil
import tempfile
from datetime import datetime, timezone as dt_timezone
from types import SimpleNamespace
from unittest import mock

from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase, TransactionTestCase, override_settings
from django.utils import timezone
from rest_framework.test import APITestCase, APITransactionTestCase

from articles import search
from articles.cache_keys import detail_cache_key
from articles.models import Article, Category, MediaAsset
from articles.text import generate_excerpt, markdown_to_text, slugify_text
from users.models import Invitation, User

BODY = "A long enough article body about soil, seeds and compost heaps."


class TextHelperTests(SimpleTestCase):
    def test_slugify(self):
        self.assertEqual(slugify_text("Hello, World's Best!"), "hello-worlds-best")
        self.assertEqual(slugify_text("snake_case  title"), "snake-case-title")
        self.assertEqual(len(slugify_text("word " * 40)), 79)

    def test_markdown_to_text(self):
        text = markdown_to_text("## Heading\n\n**Bold** [link](http://x.test) <b>tag</b>")
        self.assertEqual(text, "Heading Bold link tag")

    def test_excerpt_is_truncated(self):
        excerpt = generate_excerpt("word " * 100)
        self.assertTrue(excerpt.endswith("…"))
        self.assertLessEqual(len(excerpt), 201)


class SearchBackendTests(SimpleTestCase):
    def test_postgres_engine_detected(self):
        fake = SimpleNamespace(DATABASES={"default": {"ENGINE": "django.db.backends.postgresql"}})
        with mock.patch.object(search, "settings", fake):
            self.assertTrue(search.use_postgres())

    def test_malformed_config_falls_back(self):
        for databases in ({}, {"default": None}, {"default": {"ENGINE": 42}}):
            with mock.patch.object(search, "settings", SimpleNamespace(DATABASES=databases)):
                self.assertFalse(search.use_postgres())

    def test_clamp_limit(self):
        self.assertEqual(search.clamp_limit("500"), 50)
        self.assertEqual(search.clamp_limit("0"), 1)
        self.assertEqual(search.clamp_limit("abc"), search.PUBLIC_LIMIT)

    def test_postgres_queryset_is_ranked(self):
        from django.contrib.postgres.search import SearchRank

        with mock.patch.object(search, "use_postgres", return_value=True):
            qs = search._articles("compost", published_only=True)
        self.assertIsInstance(qs.query.annotations["rank"], SearchRank)
        self.assertEqual(qs.query.order_by[:2], ("-rank", "-field_rank"))


class AdminTestCase(APITestCase):
    def setUp(self):
        cache.clear()
        self.admin = User.objects.create_user(username="admin", password="S3curePass!", role="admin")
        self.client.force_authenticate(self.admin)


class ArticleApiTests(AdminTestCase):
    def test_create_derives_slug_and_publish_date(self):
        r = self.client.post("/api/articles/", {
            "title": "Hello Homestead World", "content": BODY, "published": True,
        }, format="json")
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.data["slug"], "hello-homestead-world")
        self.assertIsNotNone(r.data["published_at"])
        self.assertTrue(r.data["excerpt"].startswith("A long enough article"))

        r = self.client.post("/api/articles/", {"title": "Hello Homestead World", "content": BODY}, format="json")
        self.assertEqual(r.status_code, 201)
        self.assertTrue(r.data["slug"].startswith("hello-homestead-world-"))
        self.assertIsNone(r.data["published_at"])

    def test_explicit_duplicate_slug_conflicts(self):
        Article.objects.create(title="First", slug="taken-slug", content=BODY)
        r = self.client.post("/api/articles/", {"title": "Second", "slug": "taken-slug", "content": BODY}, format="json")
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.data["message"], "An article with that slug already exists.")

    def test_unpublish_clears_timestamp(self):
        article = Article.objects.create(title="Seed Swap", content=BODY, published=True)
        self.assertIsNotNone(article.published_at)

        r = self.client.put(f"/api/articles/{article.id}/", {
            "title": "Seed Swap", "content": BODY, "published": False,
            "published_at": "2024-03-18T12:00:00Z",
        }, format="json")
        self.assertEqual(r.status_code, 200)
        article.refresh_from_db()
        self.assertFalse(article.published)
        self.assertIsNone(article.published_at)

    def test_publishing_without_date_stamps_now(self):
        article = Article.objects.create(title="Seed Swap", slug="seed-swap", content=BODY)
        self.assertIsNone(article.published_at)
        before = timezone.now()

        r = self.client.put(f"/api/articles/{article.id}/", {
            "title": "Seed Swap", "slug": "seed-swap", "content": BODY,
            "published": True, "published_at": "",
        }, format="json")
        self.assertEqual(r.status_code, 200)
        article.refresh_from_db()
        self.assertTrue(article.published)
        self.assertGreaterEqual(article.published_at, before)
        self.assertLessEqual(article.published_at, timezone.now())

    def test_validation(self):
        categories = [Category.objects.create(name=f"Topic {i}") for i in range(7)]
        r = self.client.post("/api/articles/", {
            "title": "No", "content": "too short",
            "category_ids": [str(c.id) for c in categories],
        }, format="json")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(set(r.data["errors"]), {"title", "content", "category_ids"})

    def test_anonymous_sees_published_only(self):
        Article.objects.create(title="Draft", content=BODY)
        Article.objects.create(title="Live", content=BODY, published=True)
        self.client.force_authenticate(None)

        r = self.client.get("/api/articles/")
        self.assertEqual([a["title"] for a in r.data], ["Live"])
        r = self.client.post("/api/articles/", {"title": "Nope", "content": BODY}, format="json")
        self.assertEqual(r.status_code, 401)

    def test_delete(self):
        article = Article.objects.create(title="Gone Soon", content=BODY)
        r = self.client.delete(f"/api/articles/{article.id}/")
        self.assertEqual(r.data, {"success": True})
        self.assertFalse(Article.objects.exists())


class ArticleBySlugTests(AdminTestCase):
    def setUp(self):
        super().setUp()
        self.category = Category.objects.create(name="Garden Planning", color="#65a30d")
        self.article = Article.objects.create(
            title="Four Season Garden", slug="four-season-garden", content=BODY, published=True,
            published_at=datetime(2024, 3, 18, 12, 0, tzinfo=dt_timezone.utc),
        )
        self.article.categories.set([self.category])
        self.client.force_authenticate(None)

    def test_payload_per_locale(self):
        r = self.client.get("/api/articles/by-slug/four-season-garden/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["formatted_date"], "March 18, 2024")
        self.assertEqual(r.data["category_color"], "#65a30d")
        self.assertEqual(r.data["category_label"], "Garden Planning")

        r = self.client.get("/api/articles/by-slug/four-season-garden/?locale=nl")
        self.assertEqual(r.data["formatted_date"], "18 maart 2024")

    def test_drafts_are_hidden(self):
        Article.objects.create(title="Hidden Draft", slug="hidden-draft", content=BODY)
        self.assertEqual(self.client.get("/api/articles/by-slug/hidden-draft/").status_code, 404)

    def test_update_purges_cached_payload(self):
        self.client.get("/api/articles/by-slug/four-season-garden/")
        self.assertIsNotNone(cache.get(detail_cache_key("four-season-garden", "en")))

        self.client.force_authenticate(self.admin)
        with self.captureOnCommitCallbacks(execute=True):
            r = self.client.put(f"/api/articles/{self.article.id}/", {
                "title": "Four Season Kitchen Garden", "slug": "four-season-garden",
                "content": BODY, "published": True, "published_at": "2024-03-18T12:00:00Z",
            }, format="json")
        self.assertEqual(r.status_code, 200)
        self.assertIsNone(cache.get(detail_cache_key("four-season-garden", "en")))

        r = self.client.get("/api/articles/by-slug/four-season-garden/")
        self.assertEqual(r.data["title"], "Four Season Kitchen Garden")


class CategoryApiTests(AdminTestCase):
    def test_create_derives_slug(self):
        r = self.client.post("/api/categories/", {"name": "Food Preservation", "color": ""}, format="json")
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.data["slug"], "food-preservation")
        self.assertIsNone(r.data["color"])

        r = self.client.post("/api/categories/", {"name": "Food  Preservation!"}, format="json")
        self.assertEqual(r.status_code, 409)

    def test_invalid_color(self):
        r = self.client.post("/api/categories/", {"name": "Livestock", "color": "green"}, format="json")
        self.assertEqual(r.status_code, 400)
        self.assertIn("color", r.data["errors"])

    def test_delete_linked_category_conflicts(self):
        category = Category.objects.create(name="Livestock Care")
        article = Article.objects.create(title="Coop Notes", content=BODY)
        article.categories.add(category)

        r = self.client.delete(f"/api/categories/{category.id}/")
        self.assertEqual(r.status_code, 409)

        article.categories.clear()
        r = self.client.delete(f"/api/categories/{category.id}/")
        self.assertEqual(r.data, {"success": True})

    def test_list_is_public_with_counts(self):
        category = Category.objects.create(name="Beekeeping")
        Category.objects.create(name="Apiary")
        Article.objects.create(title="Hive Check", content=BODY).categories.add(category)
        self.client.force_authenticate(None)

        r = self.client.get("/api/categories/")
        self.assertEqual([c["name"] for c in r.data], ["Apiary", "Beekeeping"])
        self.assertEqual(r.data[1]["article_count"], 1)


class PublicSearchTests(APITestCase):
    def setUp(self):
        self.body_hit = Article.objects.create(
            title="Autumn Chores", content="Turning the compost pile before the frost arrives.", published=True,
        )
        self.title_hit = Article.objects.create(
            title="Compost Basics", content="Brown and green layers, kept moist all season.", published=True,
        )
        Article.objects.create(title="Compost Draft", content="Unpublished notes about the heap.")
        Category.objects.create(name="Compost", description="Soil building")

    def test_short_query_returns_nothing(self):
        r = self.client.get("/api/search/?q=c")
        self.assertEqual(r.data, {"articles": [], "categories": [], "minimum_characters": 2})

    def test_title_hits_rank_first(self):
        r = self.client.get("/api/search/?q=compost")
        self.assertEqual(r.status_code, 200)
        self.assertEqual([a["slug"] for a in r.data["articles"]], [self.title_hit.slug, self.body_hit.slug])
        self.assertEqual(r.data["articles"][0]["rank"], 0.0)
        self.assertEqual([c["name"] for c in r.data["categories"]], ["Compost"])

    def test_kinds_can_be_disabled(self):
        r = self.client.get("/api/search/?q=compost&categories=0&limit=1")
        self.assertEqual(r.data["categories"], [])
        self.assertEqual(len(r.data["articles"]), 1)


class AdminSearchTests(AdminTestCase):
    def test_requires_admin(self):
        self.client.force_authenticate(None)
        self.assertEqual(self.client.get("/api/admin/search/?q=compost").status_code, 401)

    def test_searches_all_entities(self):
        Article.objects.create(title="Compost Draft", content=BODY)
        User.objects.create_user(username="compost-fan", password="S3curePass!")
        r = self.client.get("/api/admin/search/?q=compost")
        self.assertEqual(r.status_code, 200)
        self.assertEqual([a["title"] for a in r.data["articles"]], ["Compost Draft"])
        self.assertEqual([u["username"] for u in r.data["users"]], ["compost-fan"])
        self.assertEqual(r.data["invitations"], [])
        self.assertEqual(r.data["minimum_characters"], 2)

    def test_short_query(self):
        r = self.client.get("/api/admin/search/?q=%20a%20")
        self.assertEqual(r.data["users"], [])
        self.assertEqual(r.data["articles"], [])


class UploadTests(AdminTestCase):
    def setUp(self):
        super().setUp()
        self.media_root = tempfile.mkdtemp()
        self.override = override_settings(MEDIA_ROOT=self.media_root)
        self.override.enable()

    def tearDown(self):
        self.override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def _image(self, name="cover.png", content_type="image/png", size=64):
        return SimpleUploadedFile(name, b"\x89PNG" + b"0" * size, content_type=content_type)

    def test_upload_image(self):
        r = self.client.post("/api/uploads/", {"file": self._image()}, format="multipart")
        self.assertEqual(r.status_code, 201)
        self.assertTrue(r.data["url"].startswith("/media/uploads/"))
        self.assertTrue(r.data["url"].endswith(".png"))
        self.assertEqual(MediaAsset.objects.get().uploader, self.admin)

    def test_rejects_unsupported_type(self):
        r = self.client.post("/api/uploads/", {"file": self._image("notes.txt", "text/plain")}, format="multipart")
        self.assertEqual(r.status_code, 415)
        self.assertEqual(r.data["message"], "Unsupported file type.")

    @override_settings(UPLOAD_MAX_BYTES=16)
    def test_rejects_large_file(self):
        r = self.client.post("/api/uploads/", {"file": self._image()}, format="multipart")
        self.assertEqual(r.status_code, 413)

    def test_missing_file(self):
        r = self.client.post("/api/uploads/", {}, format="multipart")
        self.assertEqual(r.status_code, 400)


class SeedContentCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_content", stdout=mock.MagicMock())
        call_command("seed_content", stdout=mock.MagicMock())
        self.assertEqual(Category.objects.count(), 4)
        self.assertEqual(Article.objects.count(), 3)
        self.assertEqual(Article.objects.published().count(), 2)


class ArticleCommitTests(APITransactionTestCase):
    """Writes outside a test transaction, so on_commit hooks fire for real."""

    def setUp(self):
        cache.clear()
        self.admin = User.objects.create_user(username="admin", password="S3curePass!", role="admin")
        self.client.force_authenticate(self.admin)

    def test_create_commits_and_purges(self):
        cache.set(detail_cache_key("compost-basics", "nl"), {"title": "stale"})
        r = self.client.post("/api/articles/", {
            "title": "Compost Basics", "content": BODY, "published": True,
        }, format="json")
        self.assertEqual(r.status_code, 201)
        self.assertTrue(Article.objects.filter(slug="compost-basics").exists())
        self.assertIsNone(cache.get(detail_cache_key("compost-basics", "nl")))

    def test_broker_failure_keeps_write(self):
        with mock.patch("articles.signals.purge_article_cache") as task:
            task.delay.side_effect = ConnectionError("broker unavailable")
            r = self.client.post("/api/articles/", {"title": "Compost Basics", "content": BODY}, format="json")
        self.assertEqual(r.status_code, 201)
        self.assertTrue(task.delay.called)
        self.assertEqual(Article.objects.count(), 1)


class ThreadedSearchTests(TransactionTestCase):
    def setUp(self):
        Article.objects.create(title="Compost Draft", content=BODY)
        Category.objects.create(name="Compost Heaps")
        User.objects.create_user(username="compost-fan", password="S3curePass!")
        Invitation.create_for(role="editor", email="compost@homestead.test")

    @override_settings(SEARCH_WORKERS=4)
    def test_admin_search_runs_on_pool(self):
        with mock.patch.object(search, "_in_worker", wraps=search._in_worker) as worker:
            results = search.search_admin_entities("compost")
        self.assertEqual(worker.call_count, 4)
        self.assertEqual({name: len(rows) for name, rows in results.items()},
                         {"articles": 1, "categories": 1, "users": 1, "invitations": 1})

    @override_settings(SEARCH_WORKERS=1)
    def test_single_worker_runs_inline(self):
        with mock.patch.object(search, "_in_worker") as worker:
            results = search.search_admin_entities("compost")
        worker.assert_not_called()
        self.assertEqual(results["users"][0]["username"], "compost-fan")
