"""General sitemap: static pages plus every published article."""

import logging
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, NamedTuple, Optional

from lxml import etree

from newsmap.config import SitemapConfig
from newsmap.errors import MalformedRecordError
from newsmap.models.article import Article
from newsmap.models.category import Category
from newsmap.models.slug import normalize_slug
from newsmap.services.xml_encoding import (
    SITEMAP_NS,
    format_date,
    format_priority,
    qname,
    serialize,
    sub_element,
)

logger = logging.getLogger(__name__)

ARTICLE_CHANGEFREQ = "daily"
ARTICLE_PRIORITY = 0.8
CATEGORY_CHANGEFREQ = "daily"
CATEGORY_PRIORITY = 0.8


class SitemapEntry(NamedTuple):
    loc: str
    lastmod: str
    changefreq: str
    priority: float


def require_slug(kind: str, record_id: object, slug: Optional[str]) -> str:
    """Return the stripped *slug*, or raise :class:`MalformedRecordError` when it is empty."""
    cleaned = normalize_slug(slug)
    if not cleaned:
        raise MalformedRecordError(kind, record_id, "missing slug")
    return cleaned


class SitemapBuilder:
    """Renders the ``sitemap.xml`` document for one snapshot of the store.

    Output depends only on the snapshot and *today*, so two calls with the
    same inputs yield byte-identical documents.
    """

    def __init__(self, config: SitemapConfig) -> None:
        self.config = config

    def static_entries(self, today: date) -> List[SitemapEntry]:
        lastmod = format_date(today)
        return [
            SitemapEntry(
                loc=f"{self.config.base_url}{page.path}",
                lastmod=lastmod,
                changefreq=page.changefreq,
                priority=page.priority,
            )
            for page in self.config.static_pages
        ]

    def category_entries(self, categories: Iterable[Category], today: date) -> List[SitemapEntry]:
        """Top-level categories live under ``/category/``, subcategories under their parent's slug."""
        categories = list(categories)
        by_id: Dict[str, Category] = {c.id: c for c in categories}
        lastmod = format_date(today)
        entries: List[SitemapEntry] = []
        seen: set = set()

        for category in categories:
            try:
                slug = require_slug("category", category.id, category.slug)
                if category.parent_id:
                    parent = by_id.get(category.parent_id)
                    if parent is None:
                        raise MalformedRecordError("category", category.id, "unknown parent_id")
                    parent_slug = require_slug("category", parent.id, parent.slug)
                    path = f"/{parent_slug}/{slug}"
                else:
                    path = f"/category/{slug}"
            except MalformedRecordError as exc:
                logger.warning("Sitemap: skipping %s", exc)
                continue

            if path in seen:
                continue
            seen.add(path)
            entries.append(
                SitemapEntry(
                    loc=f"{self.config.base_url}{path}",
                    lastmod=lastmod,
                    changefreq=CATEGORY_CHANGEFREQ,
                    priority=CATEGORY_PRIORITY,
                )
            )
        return entries

    def article_entries(self, articles: Iterable[Article], today: date) -> List[SitemapEntry]:
        """One entry per published article slug; the first occurrence of a slug wins."""
        entries: List[SitemapEntry] = []
        seen_slugs: set = set()

        for article in articles:
            if not article.published:
                continue
            try:
                slug = require_slug("article", article.id, article.slug)
            except MalformedRecordError as exc:
                logger.warning("Sitemap: skipping %s", exc)
                continue
            if slug in seen_slugs:
                logger.info("Sitemap: duplicate article slug %r ignored (id=%s)", slug, article.id)
                continue
            seen_slugs.add(slug)

            lastmod = format_date(article.updated_at) if article.updated_at else format_date(today)
            entries.append(
                SitemapEntry(
                    loc=self.config.article_url(slug),
                    lastmod=lastmod,
                    changefreq=ARTICLE_CHANGEFREQ,
                    priority=ARTICLE_PRIORITY,
                )
            )
        return entries

    def build_entries(
        self,
        articles: Iterable[Article],
        categories: Iterable[Category] = (),
        today: Optional[date] = None,
    ) -> List[SitemapEntry]:
        today = today or datetime.now(timezone.utc).date()
        entries = self.static_entries(today)
        if self.config.include_category_pages:
            entries.extend(self.category_entries(categories, today))
        entries.extend(self.article_entries(articles, today))
        return entries

    def render(
        self,
        articles: Iterable[Article],
        categories: Iterable[Category] = (),
        today: Optional[date] = None,
    ) -> bytes:
        urlset = etree.Element(qname(SITEMAP_NS, "urlset"), nsmap={None: SITEMAP_NS})
        for entry in self.build_entries(articles, categories, today):
            url = sub_element(urlset, qname(SITEMAP_NS, "url"))
            sub_element(url, qname(SITEMAP_NS, "loc"), entry.loc)
            sub_element(url, qname(SITEMAP_NS, "lastmod"), entry.lastmod)
            sub_element(url, qname(SITEMAP_NS, "changefreq"), entry.changefreq)
            sub_element(url, qname(SITEMAP_NS, "priority"), format_priority(entry.priority))
        return serialize(urlset)
