from django.core.management.base import BaseCommand
from django.db import transaction

from articles.models import Article, Category
from users.services import ensure_admin_users

CATEGORIES = [
    {
        "name": "Garden Planning",
        "slug": "garden-planning",
        "description": "Layout ideas, succession planting charts and soil prep routines for productive beds.",
        "color": "#65a30d",
    },
    {
        "name": "Food Preservation",
        "slug": "food-preservation",
        "description": "Canning marathons, dehydrator experiments and root cellar checklists.",
        "color": "#f97316",
    },
    {
        "name": "Livestock Care",
        "slug": "livestock-care",
        "description": "Practical tips from the coop, barn and pasture.",
        "color": "#a16207",
    },
    {
        "name": "Seizoenswerk",
        "slug": "seizoenswerk",
        "description": "Taken per seizoen: wat er nu in de tuin, stal en voorraadkast moet gebeuren.",
        "color": "#6366f1",
    },
]

ARTICLES = [
    {
        "title": "Charting a Four-Season Kitchen Garden",
        "slug": "four-season-kitchen-garden",
        "excerpt": "How we mapped out a resilient garden that feeds us from March through snow season.",
        "content": (
            "Last January we spread seed packets across the farm table and planned a garden "
            "that would not crash in August.\n\n## What we mapped\n\n"
            "1. **Quartering the beds.** One quadrant per season keeps succession sowing simple.\n"
            "2. **Soil tests before snow melt.** Amend early with composted chicken litter.\n"
            "3. **Row covers stacked in bins.** Number them and roll them up in fall."
        ),
        "categories": ["garden-planning", "seizoenswerk"],
        "published": True,
    },
    {
        "title": "A Weekend of Tomato Canning",
        "slug": "weekend-of-tomato-canning",
        "excerpt": "",
        "content": (
            "Forty pounds of paste tomatoes, two water bath canners and a kitchen full of steam. "
            "Here is the schedule that got us through without scorched sauce.\n\n"
            "- Blanch and peel in batches of ten.\n- Keep jars hot in the oven.\n"
            "- Label everything before it goes to the cellar."
        ),
        "categories": ["food-preservation"],
        "published": True,
    },
    {
        "title": "Winterizing the Chicken Coop",
        "slug": "winterizing-the-chicken-coop",
        "excerpt": "Draft-free, dry and well ventilated: our checklist before the first frost.",
        "content": (
            "Chickens handle cold well but hate damp. Before the first frost we check ventilation, "
            "switch to a heated waterer and deepen the litter for the long nights ahead."
        ),
        "categories": ["livestock-care"],
        "published": False,
    },
]


class Command(BaseCommand):
    help = "Seed sample categories and articles, and the configured admin accounts."

    def add_arguments(self, parser):
        parser.add_argument("--reset", action="store_true", help="Delete existing articles and categories first.")

    @transaction.atomic
    def handle(self, *args, **options):
        if options["reset"]:
            Article.objects.all().delete()
            Category.objects.all().delete()
            self.stdout.write(self.style.WARNING("Removed existing articles and categories."))

        seeded = ensure_admin_users(force=True)
        self.stdout.write(f"Admin accounts ensured: {seeded}")

        categories = {}
        for data in CATEGORIES:
            category, _ = Category.objects.update_or_create(slug=data["slug"], defaults=data)
            categories[category.slug] = category

        for data in ARTICLES:
            data = dict(data)
            slugs = data.pop("categories")
            article = Article.objects.filter(slug=data["slug"]).first() or Article(slug=data["slug"])
            for field, value in data.items():
                setattr(article, field, value)
            article.save()
            article.categories.set([categories[s] for s in slugs])

        self.stdout.write(self.style.SUCCESS(
            f"Seeded {len(CATEGORIES)} categories and {len(ARTICLES)} articles."
        ))
