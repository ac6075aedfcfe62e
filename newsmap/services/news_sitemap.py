"""Google News sitemap: recent articles with news and image metadata."""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from lxml import etree

from newsmap.config import SitemapConfig
from newsmap.errors import MalformedRecordError
from newsmap.models.article import Article
from newsmap.services.freshness import effective_time, select_fresh_articles
from newsmap.services.sitemap import require_slug
from newsmap.services.xml_encoding import (
    IMAGE_NS,
    NEWS_NS,
    SITEMAP_NS,
    CDataText,
    format_datetime,
    qname,
    serialize,
    sub_element,
)

logger = logging.getLogger(__name__)

NEWS_CHANGEFREQ = "hourly"
NEWS_PRIORITY = "0.9"
FALLBACK_KEYWORD = "news"

_NSMAP = {None: SITEMAP_NS, "news": NEWS_NS, "image": IMAGE_NS}


def keywords_for(article: Article) -> str:
    """Comma-joined tags, else the category name, else ``"news"``."""
    tags = [t for t in article.tags if t]
    if tags:
        return ", ".join(tags)
    return article.category_name or FALLBACK_KEYWORD


class NewsSitemapBuilder:
    """Renders the ``news-sitemap.xml`` document.

    Only articles published inside the configured freshness window are
    listed, newest first, capped at ``config.news_max_entries``.
    """

    def __init__(self, config: SitemapConfig) -> None:
        self.config = config

    def select(self, articles: Iterable[Article], now: datetime) -> List[Article]:
        return select_fresh_articles(
            articles,
            now,
            window=self.config.freshness_window,
            limit=self.config.news_max_entries,
        )

    def _append_url(self, urlset: etree._Element, article: Article) -> None:
        slug = require_slug("article", article.id, article.slug)
        published = format_datetime(effective_time(article))
        title = CDataText(article.title)
        # Everything that can reject the record is resolved above this line

        url = sub_element(urlset, qname(SITEMAP_NS, "url"))
        sub_element(url, qname(SITEMAP_NS, "loc"), self.config.article_url(slug))

        news = sub_element(url, qname(NEWS_NS, "news"))
        publication = sub_element(news, qname(NEWS_NS, "publication"))
        sub_element(publication, qname(NEWS_NS, "name"), self.config.publication_name)
        sub_element(publication, qname(NEWS_NS, "language"), self.config.publication_language)
        sub_element(news, qname(NEWS_NS, "publication_date"), published)
        sub_element(news, qname(NEWS_NS, "title"), title)
        sub_element(news, qname(NEWS_NS, "keywords"), CDataText(keywords_for(article)))

        image = sub_element(url, qname(IMAGE_NS, "image"))
        sub_element(image, qname(IMAGE_NS, "loc"), article.image_url or self.config.image_fallback)
        sub_element(image, qname(IMAGE_NS, "title"), title)
        sub_element(image, qname(IMAGE_NS, "caption"), CDataText(article.excerpt or article.title))

        sub_element(url, qname(SITEMAP_NS, "lastmod"), published)
        sub_element(url, qname(SITEMAP_NS, "changefreq"), NEWS_CHANGEFREQ)
        sub_element(url, qname(SITEMAP_NS, "priority"), NEWS_PRIORITY)

    def render(self, articles: Iterable[Article], now: Optional[datetime] = None) -> bytes:
        now = now or datetime.now(timezone.utc)
        urlset = etree.Element(qname(SITEMAP_NS, "urlset"), nsmap=_NSMAP)

        for article in self.select(articles, now):
            try:
                self._append_url(urlset, article)
            except MalformedRecordError as exc:
                logger.warning("News sitemap: skipping %s", exc)

        return serialize(urlset)
