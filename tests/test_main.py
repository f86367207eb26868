import json

import httpx
import pytest
from fastapi.testclient import TestClient

from app_catalog.catalog import AppCatalogBuilder
from app_catalog.main import app, get_builder, get_settings

from test_catalog import catalog_handler


@pytest.fixture
def client_for(settings, make_fetcher):
    def factory(handler):
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_builder] = lambda: AppCatalogBuilder(settings, make_fetcher(handler))
        return TestClient(app)

    yield factory
    app.dependency_overrides.clear()


def test_health_and_root(client_for):
    client = client_for(catalog_handler())

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"

    root = client.get("/")
    assert "/catalog/refresh" in root.json()["endpoints"]


def test_list_apps_endpoint(client_for):
    client = client_for(catalog_handler())

    response = client.get("/apps", params={"language": "zh-CN"})

    assert response.status_code == 200
    apps = response.json()
    assert [a["id"] for a in apps] == [1, 2, 3, 4]
    assert apps[0]["formattedPrice"] == "Free"
    assert apps[1]["device"] == "universal"


def test_screenshots_endpoint(client_for):
    client = client_for(catalog_handler())

    response = client.get("/apps/1/screenshots")

    assert response.status_code == 200
    body = response.json()
    assert body["screenshots"]["iphone"][0] == "https://img/300x600bb.jpg"
    assert body["rating"] == 4.8


def test_screenshots_endpoint_rejects_non_numeric_id(client_for):
    client = client_for(catalog_handler())
    assert client.get("/apps/abc/screenshots").status_code == 422


def test_reviews_endpoint(client_for):
    client = client_for(catalog_handler())

    response = client.get("/apps/1/reviews")

    assert response.status_code == 200
    assert [r["id"] for r in response.json()] == ["r1"]


def test_reviews_endpoint_survives_null_feed(client_for):
    base = catalog_handler()

    def handler(request):
        if request.url.path.startswith("/cn/"):
            return httpx.Response(200, json={"feed": None})
        return base(request)

    response = client_for(handler).get("/apps/1/reviews")

    assert response.status_code == 200
    assert [r["id"] for r in response.json()] == ["r1"]


def test_catalog_endpoint(client_for):
    client = client_for(catalog_handler())

    response = client.get("/catalog")

    assert response.status_code == 200
    body = response.json()
    assert [a["id"] for a in body["apps"]] == [1, 2, 3, 4, 5]
    assert "lastUpdated" in body


def test_catalog_endpoint_failure_is_500(client_for):
    client = client_for(lambda request: httpx.Response(503))

    response = client.get("/catalog")

    assert response.status_code == 500
    assert "Failed to build catalog" in response.json()["detail"]


def test_refresh_writes_data_file(client_for, settings):
    client = client_for(catalog_handler())

    response = client.post("/catalog/refresh")

    assert response.status_code == 200
    body = response.json()
    assert body["apps"] == 5
    assert body["reviews"] == 2
    written = json.loads(settings.output_file.read_text(encoding="utf-8"))
    assert written["lastUpdated"] == body["lastUpdated"]
