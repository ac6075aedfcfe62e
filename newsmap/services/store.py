"""Content store adapter: read-only access to the articles and categories collections."""

import logging
from typing import Iterable, List, Optional, Protocol, Sequence

import httpx
from pydantic import ValidationError

from newsmap.config import Settings
from newsmap.errors import ConfigurationError, MalformedRecordError, StoreQueryError
from newsmap.models.article import Article
from newsmap.models.category import Category

logger = logging.getLogger(__name__)

_ARTICLE_FIELDS = (
    "id,slug,title,excerpt,image_url,tags,published,published_at,created_at,"
    "updated_at,canonical_url,categories(name)"
)
_CATEGORY_FIELDS = "id,name,slug,parent_id"


class ContentStore(Protocol):
    async def list_published_articles(self) -> List[Article]: ...

    async def list_categories(self) -> List[Category]: ...


class InMemoryContentStore:
    """Store backed by an already-materialised snapshot.

    Handy for tests, and for callers that want every consumer to see the same
    point-in-time data.
    """

    def __init__(self, articles: Iterable[Article] = (), categories: Iterable[Category] = ()) -> None:
        self._articles = tuple(articles)
        self._categories = tuple(categories)

    async def list_published_articles(self) -> List[Article]:
        return [a for a in self._articles if a.published]

    async def list_categories(self) -> List[Category]:
        return list(self._categories)


def _row_to_article(row: dict) -> Article:
    """Convert a PostgREST ``articles`` row (with embedded category) to an :class:`Article`."""
    category = row.get("categories")
    # A to-one embed comes back as an object, older schemas return a list
    if isinstance(category, list):
        category = category[0] if category else None
    data = {k: v for k, v in row.items() if k != "categories"}
    data["category_name"] = (category or {}).get("name") or None
    try:
        return Article.model_validate(data)
    except ValidationError as exc:
        raise MalformedRecordError("article", row.get("id"), str(exc)) from exc


def _row_to_category(row: dict) -> Category:
    try:
        return Category.model_validate(row)
    except ValidationError as exc:
        raise MalformedRecordError("category", row.get("id"), str(exc)) from exc


class SupabaseContentStore:
    """Content store reading the Supabase REST (PostgREST) API over httpx.

    Each ``list_*`` call is one logical query; large collections are read in
    ``page_size`` chunks until a short page comes back.
    """

    def __init__(
        self,
        url: str,
        service_key: str,
        *,
        timeout: float = 15.0,
        page_size: int = 1000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not url or not service_key:
            raise ConfigurationError("Supabase URL and service role key are required.")
        self._rest_url = url.rstrip("/") + "/rest/v1"
        self._headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
            "Accept": "application/json",
        }
        self._timeout = timeout
        self._page_size = page_size
        self._transport = transport

    async def _fetch_rows(self, table: str, params: dict) -> List[dict]:
        rows: List[dict] = []
        offset = 0
        async with httpx.AsyncClient(
            base_url=self._rest_url,
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            while True:
                try:
                    resp = await client.get(
                        f"/{table}",
                        params={**params, "limit": self._page_size, "offset": offset},
                    )
                    resp.raise_for_status()
                    page = resp.json()
                except (httpx.HTTPError, ValueError) as exc:
                    raise StoreQueryError(f"Query on '{table}' failed: {exc}") from exc

                if not isinstance(page, list):
                    raise StoreQueryError(f"Query on '{table}' returned a non-list payload.")
                rows.extend(page)
                if len(page) < self._page_size:
                    break
                offset += self._page_size

        logger.info("Fetched %d rows from %s", len(rows), table)
        return rows

    async def list_published_articles(self) -> List[Article]:
        rows = await self._fetch_rows(
            "articles",
            {
                "select": _ARTICLE_FIELDS,
                "published": "eq.true",
                # id breaks ties so LIMIT/OFFSET pages never overlap or skip rows
                "order": "published_at.desc.nullslast,id.asc",
            },
        )
        return _convert(rows, _row_to_article)

    async def list_categories(self) -> List[Category]:
        rows = await self._fetch_rows("categories", {"select": _CATEGORY_FIELDS, "order": "name.asc,id.asc"})
        return _convert(rows, _row_to_category)


def _convert(rows: Sequence[dict], convert) -> list:
    """Apply *convert* to every row, skipping rows that cannot be parsed."""
    records = []
    for row in rows:
        try:
            records.append(convert(row))
        except MalformedRecordError as exc:
            logger.warning("Skipping malformed record: %s", exc)
    return records


def store_from_settings(settings: Settings) -> SupabaseContentStore:
    """Build the production store, refusing to run without backend credentials."""
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise ConfigurationError("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY")
    return SupabaseContentStore(
        settings.SUPABASE_URL,
        settings.SUPABASE_SERVICE_ROLE_KEY,
        timeout=settings.STORE_TIMEOUT,
        page_size=settings.STORE_PAGE_SIZE,
    )
