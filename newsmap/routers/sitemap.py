import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from newsmap.config import SitemapConfig
from newsmap.dependencies import get_sitemap_config, get_store
from newsmap.services.news_sitemap import NewsSitemapBuilder
from newsmap.services.sitemap import SitemapBuilder
from newsmap.services.store import ContentStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Sitemaps"])

# Google News wants near-real-time data: cache for an hour at most, then revalidate
CACHE_CONTROL = "s-maxage=3600, stale-while-revalidate"


@router.get(
    "/sitemap.xml",
    response_class=Response,
    summary="General sitemap",
    description="Static pages followed by every published article, in sitemap-protocol XML.",
)
async def sitemap_xml(
    config: SitemapConfig = Depends(get_sitemap_config),
    store: ContentStore = Depends(get_store),
) -> Response:
    articles = await store.list_published_articles()
    categories = await store.list_categories() if config.include_category_pages else []
    logger.info(
        "Rendering sitemap",
        extra={"articles": len(articles), "categories": len(categories)},
    )

    body = SitemapBuilder(config).render(articles, categories)
    return Response(
        content=body,
        media_type="application/xml",
        headers={"Cache-Control": CACHE_CONTROL},
    )


@router.get(
    "/news-sitemap.xml",
    response_class=Response,
    summary="Google News sitemap",
    description=(
        "Articles published in the last 48 hours (at most 1000, newest first) "
        "with `news:` and `image:` metadata."
    ),
)
async def news_sitemap_xml(
    config: SitemapConfig = Depends(get_sitemap_config),
    store: ContentStore = Depends(get_store),
) -> Response:
    now = datetime.now(timezone.utc)
    articles = await store.list_published_articles()
    logger.info("Rendering news sitemap", extra={"articles": len(articles)})

    body = NewsSitemapBuilder(config).render(articles, now=now)
    return Response(
        content=body,
        media_type="application/xml; charset=utf-8",
        headers={"Cache-Control": CACHE_CONTROL},
    )
