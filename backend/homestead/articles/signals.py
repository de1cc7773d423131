from django.db import transaction
from django.db.models.signals import m2m_changed, post_delete, post_save, pre_save
from django.dispatch import receiver

from .models import Article, Category
from .tasks import purge_article_cache
from .text import generate_excerpt


def _purge_after_commit(slugs):
    slugs = [slug for slug in slugs if slug]
    if slugs:
        transaction.on_commit(lambda: purge_article_cache.delay(slugs), robust=True)


@receiver(pre_save, sender=Article)
def fill_article_excerpt(sender, instance: Article, **kwargs):
    if not (instance.excerpt or "").strip() and instance.content:
        instance.excerpt = generate_excerpt(instance.content)
    # remember the stored slug so a rename purges the old key too
    previous = None
    if not instance._state.adding:
        previous = Article.objects.filter(pk=instance.pk).values_list("slug", flat=True).first()
    instance._previous_slug = previous


@receiver(post_save, sender=Article)
def purge_saved_article(sender, instance: Article, **kwargs):
    _purge_after_commit([instance.slug, getattr(instance, "_previous_slug", None)])


@receiver(post_delete, sender=Article)
def purge_deleted_article(sender, instance: Article, **kwargs):
    _purge_after_commit([instance.slug])


@receiver(m2m_changed, sender=Article.categories.through)
def purge_recategorized_article(sender, instance, action, **kwargs):
    if action in ("post_add", "post_remove", "post_clear") and isinstance(instance, Article):
        _purge_after_commit([instance.slug])


@receiver(post_save, sender=Category)
def purge_category_articles(sender, instance: Category, created, **kwargs):
    # article payloads embed category names and colors
    if not created:
        _purge_after_commit(list(instance.articles.values_list("slug", flat=True)))
