import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=120, unique=True, validators=[django.core.validators.MinLengthValidator(2)])),
                ("slug", models.SlugField(max_length=80, unique=True, validators=[django.core.validators.RegexValidator("^[a-z0-9]+(?:-[a-z0-9]+)*$", "Slug can only contain lowercase letters, numbers, and hyphens")])),
                ("color", models.CharField(blank=True, max_length=7, null=True, validators=[django.core.validators.RegexValidator("^#([0-9a-fA-F]{3}){1,2}$", "Color must be a valid hex code")])),
                ("description", models.TextField(blank=True, null=True)),
            ],
            options={
                "verbose_name_plural": "Categories",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Article",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(db_index=True, max_length=255, validators=[django.core.validators.MinLengthValidator(3)])),
                ("slug", models.SlugField(max_length=80, unique=True, validators=[django.core.validators.RegexValidator("^[a-z0-9]+(?:-[a-z0-9]+)*$", "Slug can only contain lowercase letters, numbers, and hyphens")])),
                ("excerpt", models.CharField(blank=True, default="", max_length=260)),
                ("content", models.TextField()),
                ("published", models.BooleanField(default=False)),
                ("published_at", models.DateTimeField(blank=True, null=True)),
                ("categories", models.ManyToManyField(blank=True, related_name="articles", to="articles.category")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["published", "published_at"], name="article_published_idx")],
            },
        ),
        migrations.CreateModel(
            name="MediaAsset",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("file_url", models.CharField(max_length=500)),
                ("mime_type", models.CharField(max_length=100)),
                ("size", models.PositiveIntegerField(default=0)),
                ("uploader", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="media_assets", to=settings.AUTH_USER_MODEL)),
            ],
        ),
    ]
