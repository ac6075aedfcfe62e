"""FastAPI dependencies.  Tests replace these through ``app.dependency_overrides``."""

from fastapi import Depends

from newsmap.config import Settings, SitemapConfig, get_settings
from newsmap.services.store import ContentStore, store_from_settings


def get_sitemap_config(settings: Settings = Depends(get_settings)) -> SitemapConfig:
    return settings.sitemap_config()


def get_store(settings: Settings = Depends(get_settings)) -> ContentStore:
    return store_from_settings(settings)
