"""Service configuration.

:class:`Settings` is read from the environment (and an optional ``.env``
file).  :class:`SitemapConfig` is the immutable object handed to every builder
and to the validator; nothing in the services reads module-level defaults
directly.
"""

from datetime import timedelta
from functools import lru_cache
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from newsmap.models.static_page import DEFAULT_STATIC_PAGES, StaticPage

DEFAULT_BASE_URL = "https://www.thebulletinbriefs.in"

# Google News ignores anything beyond 1000 <url> entries per sitemap
NEWS_MAX_ENTRIES = 1000
NEWS_FRESHNESS_WINDOW = timedelta(hours=48)


class SitemapConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str = DEFAULT_BASE_URL
    default_image_url: Optional[str] = None
    static_pages: Tuple[StaticPage, ...] = DEFAULT_STATIC_PAGES
    publication_name: str = "TheBulletinBriefs"
    publication_language: str = "en"
    freshness_window: timedelta = NEWS_FRESHNESS_WINDOW
    news_max_entries: int = Field(default=NEWS_MAX_ENTRIES, ge=1, le=NEWS_MAX_ENTRIES)
    article_path: str = "/article/"
    include_category_pages: bool = False

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def image_fallback(self) -> str:
        """Image used for news entries whose article has no image of its own."""
        return self.default_image_url or f"{self.base_url}/default-article-image.jpg"

    def article_url(self, slug: str) -> str:
        return f"{self.base_url}{self.article_path}{slug.lstrip('/')}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Backend (Supabase / PostgREST)
    SUPABASE_URL: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None
    STORE_TIMEOUT: float = 15.0
    STORE_PAGE_SIZE: int = 1000

    # Site
    SITE_BASE_URL: str = DEFAULT_BASE_URL
    DEFAULT_IMAGE_URL: Optional[str] = None
    PUBLICATION_NAME: str = "TheBulletinBriefs"
    PUBLICATION_LANGUAGE: str = "en"
    INCLUDE_CATEGORY_PAGES: bool = False

    # Rate limiting / logging
    VALIDATE_RATE_LIMIT: str = "10/minute"
    LOG_LEVEL: str = "INFO"

    def sitemap_config(self) -> SitemapConfig:
        return SitemapConfig(
            base_url=self.SITE_BASE_URL,
            default_image_url=self.DEFAULT_IMAGE_URL,
            publication_name=self.PUBLICATION_NAME,
            publication_language=self.PUBLICATION_LANGUAGE,
            include_category_pages=self.INCLUDE_CATEGORY_PAGES,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
