"""
Full-text search for the public site and the admin dashboard.

On PostgreSQL, articles and categories are ranked with ``ts_rank_cd`` over
weighted ``simple`` vectors (title/name A, excerpt/description B, content C).
Every other engine, or a settings block we cannot read, falls back to
case-insensitive substring matching with a reported rank of 0; title/name
hits still sort ahead of body hits there.

Users and invitations are always matched by substring.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

from django.conf import settings
from django.db import connection, connections
from django.db.models import Case, F, FloatField, IntegerField, Q, Value, When
from django.db.models.functions import Substr

from users.models import User, Invitation
from .models import Article, Category
from .text import article_snippet, collapse_whitespace

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
PUBLIC_LIMIT = 10
ADMIN_LIMIT = 25
MAX_LIMIT = 50

POSTGRES_ENGINES = ("postgresql", "postgresql_psycopg2", "postgis")


def use_postgres():
    try:
        engine = settings.DATABASES["default"]["ENGINE"]
    except (AttributeError, KeyError, TypeError):
        return False
    if not isinstance(engine, str):
        return False
    return engine.rsplit(".", 1)[-1] in POSTGRES_ENGINES


def is_searchable(query):
    return len((query or "").strip()) >= MIN_QUERY_LENGTH


def _newest_first(field):
    return F(field).desc(nulls_last=True)


def _ranked(qs, query, weighted_fields, fallback_fields):
    """
    Annotate ``rank`` and filter to hits.

    ``weighted_fields`` is a list of (field, weight) for the tsvector;
    ``fallback_fields`` lists fields from strongest to weakest for the
    substring strategy.
    """
    if use_postgres():
        from django.contrib.postgres.search import SearchQuery, SearchRank, SearchVector

        vector = None
        for field, weight in weighted_fields:
            part = SearchVector(field, weight=weight, config="simple")
            vector = part if vector is None else vector + part
        search_query = SearchQuery(query, config="simple", search_type="plain")
        return (
            qs.annotate(rank=SearchRank(vector, search_query, cover_density=True))
            .filter(rank__gt=0.0)
            .annotate(field_rank=Value(0, output_field=IntegerField()))
        )

    # Fallback: icontains
    hit = Q()
    whens = []
    for position, field in enumerate(fallback_fields):
        lookup = {f"{field}__icontains": query}
        hit |= Q(**lookup)
        whens.append(When(Q(**lookup), then=Value(len(fallback_fields) - position)))
    return qs.filter(hit).annotate(
        rank=Value(0.0, output_field=FloatField()),
        field_rank=Case(*whens, default=Value(0), output_field=IntegerField()),
    )


def _articles(query, published_only):
    qs = Article.objects.all()
    if published_only:
        qs = qs.published()
    qs = _ranked(
        qs, query,
        weighted_fields=[("title", "A"), ("excerpt", "B"), ("content", "C")],
        fallback_fields=["title", "excerpt", "content"],
    )
    return qs.order_by("-rank", "-field_rank", _newest_first("published_at"), "-created_at")


def _categories(query):
    qs = _ranked(
        Category.objects.all(), query,
        weighted_fields=[("name", "A"), ("description", "B")],
        fallback_fields=["name", "description"],
    )
    return qs.order_by("-rank", "-field_rank", "name")


def _public_articles(query, limit):
    rows = _articles(query, published_only=True).annotate(
        content_head=Substr("content", 1, 200),
    ).values("id", "title", "slug", "excerpt", "content_head", "published_at", "rank")[:limit]
    return [
        {
            "id": row["id"],
            "title": row["title"],
            "slug": row["slug"],
            "snippet": article_snippet(row["excerpt"], row["content_head"]),
            "published_at": row["published_at"],
            "rank": float(row["rank"]),
        }
        for row in rows
    ]


def _public_categories(query, limit):
    rows = _categories(query).values("id", "name", "slug", "description", "rank")[:limit]
    return [
        dict(row, description=collapse_whitespace(row["description"]), rank=float(row["rank"]))
        for row in rows
    ]


def _admin_articles(query):
    rows = _articles(query, published_only=False).values("id", "title", "slug", "published", "rank")[:ADMIN_LIMIT]
    return [dict(row, rank=float(row["rank"])) for row in rows]


def _admin_categories(query):
    rows = _categories(query).values("id", "name", "slug", "rank")[:ADMIN_LIMIT]
    return [dict(row, rank=float(row["rank"])) for row in rows]


def _admin_users(query):
    qs = User.objects.filter(
        Q(username__icontains=query) | Q(username_normalized__icontains=query)
    ).order_by("username")
    return list(qs.values("id", "username", "role")[:ADMIN_LIMIT])


def _admin_invitations(query):
    qs = Invitation.objects.filter(
        Q(email__icontains=query) | Q(token__icontains=query)
    ).order_by("-created_at")
    return list(qs.values("id", "email", "token", "expires_at", "used_at")[:ADMIN_LIMIT])


def _in_worker(job, query):
    try:
        return job(query)
    finally:
        # worker threads open their own connections
        connections.close_all()


def run_searches(query, jobs):
    """
    Run each enabled job (``name -> callable(query) | None``) and collect
    the results by name; disabled jobs yield an empty list.

    Jobs run on a thread pool unless we are inside a transaction, whose
    uncommitted rows other connections cannot see.
    """
    results = {name: [] for name in jobs}
    enabled = {name: job for name, job in jobs.items() if job is not None}
    workers = min(settings.SEARCH_WORKERS, len(enabled))

    if workers <= 1 or connection.in_atomic_block:
        for name, job in enabled.items():
            results[name] = job(query)
        return results

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="search") as pool:
        futures = {name: pool.submit(_in_worker, job, query) for name, job in enabled.items()}
        for name, future in futures.items():
            results[name] = future.result()
    return results


def clamp_limit(limit, default=PUBLIC_LIMIT):
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        return default
    return max(1, min(limit, MAX_LIMIT))


def search_public_content(query, include_articles=True, include_categories=True, limit=PUBLIC_LIMIT):
    query = (query or "").strip()
    if not is_searchable(query):
        return {"articles": [], "categories": []}

    limit = clamp_limit(limit)
    logger.debug("Public search %r (limit %s, postgres=%s)", query, limit, use_postgres())
    return run_searches(query, {
        "articles": (lambda q: _public_articles(q, limit)) if include_articles else None,
        "categories": (lambda q: _public_categories(q, limit)) if include_categories else None,
    })


def search_admin_entities(query):
    query = (query or "").strip()
    if not is_searchable(query):
        return {"articles": [], "categories": [], "users": [], "invitations": []}

    return run_searches(query, {
        "articles": _admin_articles,
        "categories": _admin_categories,
        "users": _admin_users,
        "invitations": _admin_invitations,
    })
