"""Tests for the HTTP surface: sitemap, news sitemap and validation endpoints.

The content store is replaced through ``app.dependency_overrides`` so no
backend is contacted.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from lxml import etree

from newsmap.config import Settings, SitemapConfig, get_settings
from newsmap.dependencies import get_sitemap_config, get_store
from newsmap.errors import StoreQueryError
from newsmap.main import app
from newsmap.models.article import Article
from newsmap.models.category import Category
from newsmap.services.store import InMemoryContentStore
from newsmap.services.xml_encoding import SITEMAP_NS

client = TestClient(app)

_BASE = "https://example.com"
_NS = {"sm": SITEMAP_NS}


def _now() -> datetime:
    return datetime.now(timezone.utc)


_ARTICLES = [
    Article(
        id="1",
        slug="fresh-story",
        title="Fresh ]]> story",
        published=True,
        published_at=_now() - timedelta(hours=2),
        updated_at=_now() - timedelta(hours=1),
        canonical_url=f"{_BASE}/article/fresh-story",
    ),
    Article(
        id="2",
        slug="old-story",
        title="Old story",
        published=True,
        published_at=_now() - timedelta(days=10),
        updated_at=_now() - timedelta(days=9),
    ),
    Article(id="3", slug="draft", title="Draft", published=False, published_at=_now()),
]

_CATEGORIES = [
    Category(id=1, name="News", slug="news"),
    Category(id=2, name="World", slug="world", parent_id=1),
]


class _FailingStore:
    async def list_published_articles(self):
        raise StoreQueryError("upstream said: relation 'articles' does not exist")

    async def list_categories(self):
        raise StoreQueryError("upstream said: relation 'categories' does not exist")


@pytest.fixture(autouse=True)
def overrides():
    """Serve a fixed snapshot and clear the slowapi counter for every test."""
    app.state.limiter._storage.reset()
    app.dependency_overrides[get_sitemap_config] = lambda: SitemapConfig(base_url=_BASE)
    app.dependency_overrides[get_store] = lambda: InMemoryContentStore(_ARTICLES, _CATEGORIES)
    yield
    app.dependency_overrides.clear()


def _locs(content: bytes) -> list[str]:
    return [e.text for e in etree.fromstring(content).iterfind("sm:url/sm:loc", _NS)]


class TestSitemapEndpoint:
    def test_returns_xml_with_cache_headers(self):
        resp = client.get("/sitemap.xml")
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/xml"
        assert resp.headers["cache-control"] == "s-maxage=3600, stale-while-revalidate"

    def test_lists_static_pages_and_all_published_articles(self):
        locs = _locs(client.get("/sitemap.xml").content)
        assert len(locs) == 12
        assert f"{_BASE}/article/old-story" in locs
        assert f"{_BASE}/article/draft" not in locs

    def test_category_pages_when_enabled(self):
        app.dependency_overrides[get_sitemap_config] = lambda: SitemapConfig(
            base_url=_BASE, include_category_pages=True
        )
        locs = _locs(client.get("/sitemap.xml").content)
        assert f"{_BASE}/category/news" in locs
        assert f"{_BASE}/news/world" in locs

    def test_post_not_allowed(self):
        assert client.post("/sitemap.xml").status_code == 405


class TestNewsSitemapEndpoint:
    def test_returns_only_fresh_articles(self):
        resp = client.get("/news-sitemap.xml")
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/xml; charset=utf-8"
        assert resp.headers["cache-control"] == "s-maxage=3600, stale-while-revalidate"
        assert _locs(resp.content) == [f"{_BASE}/article/fresh-story"]

    def test_document_is_well_formed_with_cdata_terminator(self):
        root = etree.fromstring(client.get("/news-sitemap.xml").content)
        title = root.findtext(
            "sm:url/news:news/news:title",
            namespaces={**_NS, "news": "http://www.google.com/schemas/sitemap-news/0.9"},
        )
        assert title == "Fresh ]]> story"

    def test_put_not_allowed(self):
        assert client.put("/news-sitemap.xml").status_code == 405


class TestValidateEndpoint:
    def test_report_shape(self):
        resp = client.get("/validate-sitemap")
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/json"
        body = resp.json()
        assert body["valid"] is True
        assert body["errors"] == []
        assert body["warnings"] == ["Article old-story is missing canonical URL"]
        assert body["stats"] == {
            "totalUrlCount": 14,
            "categoriesCount": 2,
            "articlesCount": 2,
            "staticPagesCount": 10,
        }

    def test_reports_errors(self):
        categories = [Category(id=1, slug="a"), Category(id=2, slug="a", parent_id=99)]
        app.dependency_overrides[get_store] = lambda: InMemoryContentStore([], categories)
        body = client.get("/validate-sitemap").json()
        assert body["valid"] is False
        assert len(body["errors"]) == 2


class TestErrorHandling:
    def test_missing_credentials_is_generic_500(self):
        del app.dependency_overrides[get_store]
        app.dependency_overrides[get_settings] = lambda: Settings(
            SUPABASE_URL=None, SUPABASE_SERVICE_ROLE_KEY=None, _env_file=None
        )
        for path in ("/sitemap.xml", "/news-sitemap.xml", "/validate-sitemap"):
            resp = client.get(path)
            assert resp.status_code == 500
            assert resp.json() == {"detail": "Server configuration error"}

    def test_store_failure_does_not_leak_detail(self):
        app.dependency_overrides[get_store] = lambda: _FailingStore()
        for path in ("/sitemap.xml", "/news-sitemap.xml", "/validate-sitemap"):
            resp = client.get(path)
            assert resp.status_code == 500
            assert resp.json() == {"detail": "Database query failed"}
            assert "relation" not in resp.text


def test_health_check():
    assert client.get("/").json() == {"message": "Hello from newsmap"}
