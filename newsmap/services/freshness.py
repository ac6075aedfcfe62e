"""Freshness filter: published articles from a trailing time window, newest first."""

import logging
from datetime import datetime, timedelta
from typing import Iterable, List

from newsmap.config import NEWS_FRESHNESS_WINDOW, NEWS_MAX_ENTRIES
from newsmap.errors import MalformedRecordError
from newsmap.models.article import Article, as_utc

logger = logging.getLogger(__name__)


def effective_time(article: Article) -> datetime:
    """Return the article's effective publish time.

    Raises:
        MalformedRecordError: if neither ``published_at`` nor ``created_at`` is set.
    """
    ts = article.effective_published_at
    if ts is None:
        raise MalformedRecordError("article", article.id, "missing published_at and created_at")
    return ts


def select_fresh_articles(
    articles: Iterable[Article],
    now: datetime,
    window: timedelta = NEWS_FRESHNESS_WINDOW,
    limit: int = NEWS_MAX_ENTRIES,
) -> List[Article]:
    """Return published articles with ``now - window <= t <= now``.

    *t* is the effective publish time.  The result is ordered by *t*
    descending (ties keep their input order) and truncated to *limit* entries.
    Articles without any timestamp are logged and left out.
    """
    now = as_utc(now)
    cutoff = now - window
    fresh: List[tuple[datetime, Article]] = []

    for article in articles:
        if not article.published:
            continue
        try:
            ts = effective_time(article)
        except MalformedRecordError as exc:
            logger.warning("Freshness filter: skipping %s", exc)
            continue
        if cutoff <= ts <= now:
            fresh.append((ts, article))

    fresh.sort(key=lambda pair: pair[0], reverse=True)
    return [article for _, article in fresh[:limit]]
