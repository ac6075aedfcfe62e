"""Tests for the content store adapters.

The Supabase REST API is replaced by an ``httpx.MockTransport`` so the tests
run without network access.
"""

import asyncio

import httpx
import pytest

from newsmap.config import Settings
from newsmap.errors import ConfigurationError, StoreQueryError
from newsmap.models.article import Article
from newsmap.services.store import InMemoryContentStore, SupabaseContentStore, store_from_settings

_URL = "https://project.supabase.co"


def _store(handler, page_size: int = 1000) -> SupabaseContentStore:
    return SupabaseContentStore(_URL, "service-key", page_size=page_size, transport=httpx.MockTransport(handler))


class TestSupabaseContentStore:
    def test_articles_request_and_mapping(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            seen["apikey"] = request.headers["apikey"]
            seen["auth"] = request.headers["authorization"]
            return httpx.Response(
                200,
                json=[
                    {
                        "id": 1,
                        "slug": "hello",
                        "title": "Hello",
                        "tags": None,
                        "published": True,
                        "published_at": "2024-05-01T10:00:00+00:00",
                        "created_at": "2024-05-01T09:00:00+00:00",
                        "updated_at": "2024-05-02T09:00:00+00:00",
                        "categories": {"name": "World"},
                    }
                ],
            )

        [article] = asyncio.run(_store(handler).list_published_articles())

        assert seen["path"] == "/rest/v1/articles"
        assert seen["params"]["published"] == "eq.true"
        assert "categories(name)" in seen["params"]["select"]
        assert seen["apikey"] == "service-key"
        assert seen["auth"] == "Bearer service-key"
        assert article.id == "1"
        assert article.tags == []
        assert article.category_name == "World"

    def test_paginates_until_short_page(self):
        offsets = []

        def handler(request: httpx.Request) -> httpx.Response:
            offset = int(request.url.params["offset"])
            offsets.append(offset)
            rows = [{"id": offset + i, "slug": f"c{offset + i}"} for i in range(2 if offset < 4 else 1)]
            return httpx.Response(200, json=rows)

        categories = asyncio.run(_store(handler, page_size=2).list_categories())

        assert offsets == [0, 2, 4]
        assert [c.slug for c in categories] == ["c0", "c1", "c2", "c3", "c4"]

    def test_ordering_has_unique_tiebreaker(self):
        orders = {}

        def handler(request: httpx.Request) -> httpx.Response:
            orders[request.url.path] = request.url.params["order"]
            return httpx.Response(200, json=[])

        store = _store(handler)
        asyncio.run(store.list_published_articles())
        asyncio.run(store.list_categories())

        assert orders["/rest/v1/articles"] == "published_at.desc.nullslast,id.asc"
        assert orders["/rest/v1/categories"] == "name.asc,id.asc"

    def test_malformed_rows_are_skipped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"slug": "no-id"}, {"id": 2, "slug": "ok"}])

        categories = asyncio.run(_store(handler).list_categories())
        assert [c.slug for c in categories] == ["ok"]

    def test_embedded_category_list_form(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"id": 1, "slug": "a", "published": True, "categories": [{"name": "Tech"}]}])

        [article] = asyncio.run(_store(handler).list_published_articles())
        assert article.category_name == "Tech"

    def test_http_error_raises_store_query_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"message": "down"})

        with pytest.raises(StoreQueryError):
            asyncio.run(_store(handler).list_categories())

    def test_network_error_raises_store_query_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(StoreQueryError):
            asyncio.run(_store(handler).list_published_articles())

    def test_bad_json_raises_store_query_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>oops</html>")

        with pytest.raises(StoreQueryError):
            asyncio.run(_store(handler).list_categories())

    def test_non_list_payload_raises_store_query_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"rows": []})

        with pytest.raises(StoreQueryError):
            asyncio.run(_store(handler).list_categories())

    def test_missing_credentials(self):
        with pytest.raises(ConfigurationError):
            SupabaseContentStore("", "key")


class TestStoreFromSettings:
    def test_missing_key_raises(self):
        settings = Settings(SUPABASE_URL=_URL, SUPABASE_SERVICE_ROLE_KEY=None, _env_file=None)
        with pytest.raises(ConfigurationError):
            store_from_settings(settings)

    def test_builds_store(self):
        settings = Settings(SUPABASE_URL=_URL, SUPABASE_SERVICE_ROLE_KEY="k", _env_file=None)
        assert isinstance(store_from_settings(settings), SupabaseContentStore)


class TestInMemoryContentStore:
    def test_filters_unpublished(self):
        store = InMemoryContentStore(
            articles=[Article(id="1", slug="a", published=True), Article(id="2", slug="b")],
        )
        articles = asyncio.run(store.list_published_articles())
        assert [a.slug for a in articles] == ["a"]
        assert asyncio.run(store.list_categories()) == []
