import logging

from celery import shared_task
from django.core.cache import cache

from .cache_keys import detail_cache_keys

logger = logging.getLogger(__name__)


@shared_task(ignore_result=True)
def purge_article_cache(slugs):
    keys = detail_cache_keys(sorted(set(slugs)))
    cache.delete_many(keys)
    logger.debug("Purged %d cached article payloads", len(keys))
