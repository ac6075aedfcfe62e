import logging

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from newsmap.config import SitemapConfig, get_settings
from newsmap.dependencies import get_sitemap_config, get_store
from newsmap.models.validation import ValidationResult
from newsmap.services.store import ContentStore
from newsmap.services.validator import IntegrityValidator

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter(tags=["Validation"])


@router.get(
    "/validate-sitemap",
    response_model=ValidationResult,
    summary="Check the content store for sitemap integrity problems",
    description=(
        "Cross-checks published articles and categories: missing or duplicate "
        "slugs and dangling category parents are errors; missing canonical URLs "
        "and category parent cycles are warnings.  `valid` is true when there "
        "are no errors."
    ),
)
@limiter.limit(lambda: get_settings().VALIDATE_RATE_LIMIT)
async def validate_sitemap(
    request: Request,
    config: SitemapConfig = Depends(get_sitemap_config),
    store: ContentStore = Depends(get_store),
) -> ValidationResult:
    """Run the integrity validator over one snapshot of the store."""
    articles = await store.list_published_articles()
    categories = await store.list_categories()

    result = IntegrityValidator(config).validate(articles, categories)
    logger.info(
        "Sitemap validation finished",
        extra={"valid": result.valid, "errors": len(result.errors), "warnings": len(result.warnings)},
    )
    return result
