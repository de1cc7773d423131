from django.conf import settings
from django.db import models

from articles.models import BaseModel

LOCALE_CHOICES = [(code, code.upper()) for code in settings.SUPPORTED_LOCALES]


class HomepageContent(BaseModel):
    """
    Stored copy for one locale; keys missing from ``data`` fall back to the
    dictionary defaults.
    """
    locale = models.CharField(max_length=8, choices=LOCALE_CHOICES, unique=True)
    data = models.JSONField(default=dict, blank=True)

    def __str__(self):
        return f"Homepage<{self.locale}>"


class HomepagePreset(BaseModel):
    locale = models.CharField(max_length=8, choices=LOCALE_CHOICES)
    name = models.CharField(max_length=120)
    data = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-updated_at"]
        constraints = [
            models.UniqueConstraint(fields=["locale", "name"], name="unique_homepage_preset"),
        ]

    def __str__(self):
        return f"{self.name} ({self.locale})"


class SiteSetting(models.Model):
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.key}={self.value}"
