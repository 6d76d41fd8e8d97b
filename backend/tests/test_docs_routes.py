"""
apidoc — Documentation Endpoint Tests
======================================

What:  End-to-end tests of the documentation routes over HTTP.
How:   The sample shop API from conftest.py is served through HTTPX's
       ASGITransport; no server is started.

What we test:
    ✅ /api/version counts and copyright fields
    ✅ /api/info module order, route order and exclusions
    ✅ /api/example/{id}.json serves the canned body; unknown ids are 404
    ✅ Disabled mode answers with empty results
    ✅ /api/refresh rebuilds; a failing build answers 500 and is retried
    ✅ /health reports the cache state without building it
"""

import json

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from apidoc.config import Settings

from conftest import CountingRegistry


def all_routes(modules):
    return [route for module in modules for route in module["routes"]]


class TestVersionEndpoint:
    @pytest.mark.asyncio
    async def test_version(self, test_client):
        response = await test_client.get("/api/version")
        assert response.status_code == 200
        assert response.json() == {
            "title": "Shop API",
            "team": "platform",
            "version": "2.1.0",
            "copyright": "(c) Shop",
            "comment_in_return_example": True,
            "return_record_level": False,
            "global_response": [{"code": 200, "msg": "ok"}],
            "group_count": 3,
            "api_count": 5,
        }


class TestInfoEndpoint:
    @pytest.mark.asyncio
    async def test_module_order(self, test_client):
        modules = (await test_client.get("/api/info")).json()
        assert [(m["name"], m["index"]) for m in modules] == [
            ("User-UserController", 0),
            ("Orders", 2),
            ("Billing", 2),
        ]

    @pytest.mark.asyncio
    async def test_route_order_and_titles(self, test_client):
        modules = (await test_client.get("/api/info")).json()
        titles = {m["name"]: [r["title"] for r in m["routes"]] for m in modules}
        assert titles == {
            "User-UserController": ["List users", "Get user"],
            "Orders": ["List orders", "Create order"],
            "Billing": ["Create order"],
        }

    @pytest.mark.asyncio
    async def test_excluded_routes_are_absent(self, test_client):
        modules = (await test_client.get("/api/info")).json()
        documented = {(r["methods"][0], r["urls"][0]) for r in all_routes(modules)}
        assert documented == {
            ("GET", "/users"),
            ("GET", "/users/{user_id}"),
            ("GET", "/orders"),
            ("POST", "/orders"),
        }

    @pytest.mark.asyncio
    async def test_route_details(self, test_client):
        modules = (await test_client.get("/api/info")).json()
        get_user = next(r for r in all_routes(modules) if r["title"] == "Get user")
        list_users = next(r for r in all_routes(modules) if r["title"] == "List users")
        create_order = next(r for r in all_routes(modules) if r["title"] == "Create order")

        assert get_user["desc"] == "Look a user up by id"
        assert get_user["responses"] == [{"code": 200, "msg": "found"}, {"code": 404, "msg": "no such user"}]
        assert list_users["responses"] == [{"code": 200, "msg": "ok"}]
        assert [p["name"] for p in get_user["params"]] == ["user_id"]
        assert create_order["comment_in_return_example"] is False
        assert get_user["example_url"] == f"http://docs.example.com/api/example/{get_user['id']}.json"

    @pytest.mark.asyncio
    async def test_built_once_across_requests(self, test_client, shop_app):
        await test_client.get("/api/info")
        await test_client.get("/api/version")
        await test_client.get("/api/info")
        assert shop_app.state.document_cache.build_count == 1


class TestExampleEndpoint:
    @pytest.mark.asyncio
    async def test_example_body(self, test_client):
        modules = (await test_client.get("/api/info")).json()
        get_user = next(r for r in all_routes(modules) if r["title"] == "Get user")

        response = await test_client.get(f"/api/example/{get_user['id']}.json")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert response.text == get_user["return_json"]
        assert json.loads(response.text) == {"id": 7, "name": "Ada", "tags": []}

    @pytest.mark.asyncio
    async def test_unknown_id(self, test_client):
        response = await test_client.get("/api/example/does-not-exist.json")
        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert "does-not-exist" in body["message"]
        assert body["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_example_url_from_request_when_no_domain(self, app_factory, doc_settings):
        app = app_factory(doc_settings.model_copy(update={"domain": ""}))
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            modules = (await client.get("/api/info")).json()
        route = all_routes(modules)[0]
        assert route["example_url"] == f"http://test/api/example/{route['id']}.json"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("template", ["/api/example/{id}.json", "example/{id}.json", "/example/{key}.json"])
    async def test_published_example_url_is_served(self, app_factory, doc_settings, template):
        """Every template form mounts the route its published URLs point at."""
        app = app_factory(doc_settings.model_copy(update={"domain": "http://test", "example_path": template}))
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            modules = (await client.get("/api/info")).json()
            get_user = next(r for r in all_routes(modules) if r["title"] == "Get user")
            assert get_user["example_url"] == f"http://test/api/example/{get_user['id']}.json"

            response = await client.get(get_user["example_url"])

        assert response.status_code == 200
        assert json.loads(response.text) == {"id": 7, "name": "Ada", "tags": []}


class TestRefresh:
    @pytest.mark.asyncio
    async def test_refresh_rebuilds(self, test_client, shop_app):
        await test_client.get("/api/info")

        response = await test_client.post("/api/refresh")

        assert response.status_code == 200
        assert response.json()["api_count"] == 5
        assert shop_app.state.document_cache.build_count == 2

    @pytest.mark.asyncio
    async def test_failed_build_is_retried(self, test_client, shop_app):
        registry = CountingRegistry()
        registry.fail_next = 1
        shop_app.state.document_cache.registry = registry

        failed = await test_client.get("/api/info")
        assert failed.status_code == 500
        assert failed.json()["error"] == "build_error"

        retried = await test_client.get("/api/info")
        assert retried.status_code == 200
        assert retried.json() == []
        assert registry.calls == 2


class TestDisabledDocumentation:
    @pytest_asyncio.fixture(params=[{"doc_online": True}, {"doc_enabled": False}])
    async def disabled_client(self, request, app_factory):
        app = app_factory(Settings(**request.param))
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client

    @pytest.mark.asyncio
    async def test_empty_answers(self, disabled_client):
        assert (await disabled_client.get("/api/info")).json() == []
        assert (await disabled_client.get("/api/version")).json() is None
        assert (await disabled_client.post("/api/refresh")).json() is None

        example = await disabled_client.get("/api/example/anything.json")
        assert example.status_code == 200
        assert example.text == ""

    @pytest.mark.asyncio
    async def test_health_reports_disabled(self, disabled_client):
        body = (await disabled_client.get("/health")).json()
        assert body["documentation"] == "disabled"


class TestHealthEndpoint:
    @pytest.mark.asyncio
    async def test_health_does_not_build(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["documentation"] == "empty"

        await test_client.get("/api/info")
        assert (await test_client.get("/health")).json()["documentation"] == "ready"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc12345"})
        assert response.headers["X-Request-ID"] == "abc12345"
