from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Callable

import httpx
import pytest

from recipebox.app.domain.errors import TransportError
from recipebox.app.domain.models import Recipe, RecipeDraft
from recipebox.app.infra.api.http_gateway import HttpRecipeGateway

BASE_URL = "http://api.test"


def recipe_json(recipe_id: object = "1", **overrides: object) -> dict:
    data = {
        "id": recipe_id,
        "title": "Soup",
        "description": "Hot",
        "ingredients": ["water"],
        "instructions": ["boil"],
        "prepTime": 5,
        "cookTime": 10,
        "servings": 2,
        "ownerId": "u1",
        "isFavorite": False,
        "createdAt": "2024-01-15T12:00:00Z",
        "updatedAt": "2024-01-15T12:00:00Z",
    }
    data.update(overrides)
    return data


def make_gateway(handler: Callable[[httpx.Request], httpx.Response]) -> HttpRecipeGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    return HttpRecipeGateway(BASE_URL, client=client)


class RequestLog:
    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


class TestListRecipes:
    @pytest.mark.asyncio
    async def test_list_parses_recipes(self) -> None:
        log = RequestLog(httpx.Response(200, json=[recipe_json("1"), recipe_json(2, title="Bread")]))
        gateway = make_gateway(log)

        recipes = await gateway.list_recipes()

        assert [r.id for r in recipes] == ["1", "2"]
        assert recipes[1].title == "Bread"
        assert recipes[0].created_at == datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
        assert log.requests[0].method == "GET"
        assert log.requests[0].url.path == "/api/recipes"

    @pytest.mark.asyncio
    async def test_list_accepts_legacy_user_id(self) -> None:
        legacy = recipe_json("1")
        legacy["userId"] = legacy.pop("ownerId")
        gateway = make_gateway(RequestLog(httpx.Response(200, json=[legacy])))

        recipes = await gateway.list_recipes()

        assert recipes[0].owner_id == "u1"

    @pytest.mark.asyncio
    async def test_naive_timestamps_are_utc(self) -> None:
        body = [recipe_json("1", createdAt="2024-01-15T12:00:00", updatedAt="2024-01-15T12:00:00")]
        gateway = make_gateway(RequestLog(httpx.Response(200, json=body)))

        recipes = await gateway.list_recipes()

        assert recipes[0].created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_server_error_raises_transport_error(self) -> None:
        gateway = make_gateway(RequestLog(httpx.Response(500)))

        with pytest.raises(TransportError) as exc_info:
            await gateway.list_recipes()

        assert exc_info.value.status_code == 500
        assert exc_info.value.operation == "list recipes"

    @pytest.mark.asyncio
    async def test_invalid_body_raises_transport_error(self) -> None:
        gateway = make_gateway(RequestLog(httpx.Response(200, json={"not": "a list"})))

        with pytest.raises(TransportError):
            await gateway.list_recipes()

    @pytest.mark.asyncio
    async def test_connection_error_raises_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        gateway = make_gateway(handler)

        with pytest.raises(TransportError) as exc_info:
            await gateway.list_recipes()

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        gateway = make_gateway(handler)

        with pytest.raises(TransportError) as exc_info:
            await gateway.list_recipes()

        assert "timeout" in exc_info.value.reason


class TestMutations:
    @pytest.mark.asyncio
    async def test_create_posts_draft_with_owner(self) -> None:
        log = RequestLog(httpx.Response(201, json=recipe_json("42")))
        gateway = make_gateway(log)
        draft = RecipeDraft(title="Soup", ingredients=["water"], instructions=["boil"], prep_time=5, cook_time=10, servings=2)

        recipe = await gateway.create_recipe(draft, "u1")

        assert recipe.id == "42"
        request = log.requests[0]
        body = json.loads(request.content)
        assert request.method == "POST"
        assert request.url.path == "/api/recipes"
        assert body["ownerId"] == "u1"
        assert body["title"] == "Soup"
        assert body["prepTime"] == 5
        assert "id" not in body
        assert "isFavorite" not in body

    @pytest.mark.asyncio
    async def test_update_puts_merged_record(self) -> None:
        log = RequestLog(httpx.Response(200, json=recipe_json("7", title="New")))
        gateway = make_gateway(log)
        now = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
        recipe = Recipe(id="7", title="New", owner_id="u1", created_at=now, updated_at=now, is_favorite=True)

        result = await gateway.update_recipe(recipe)

        request = log.requests[0]
        body = json.loads(request.content)
        assert request.method == "PUT"
        assert request.url.path == "/api/recipes/7"
        assert body["ownerId"] == "u1"
        assert body["isFavorite"] is True
        assert result.title == "New"

    @pytest.mark.asyncio
    async def test_set_favorite_patches_flag_only(self) -> None:
        log = RequestLog(httpx.Response(200, json=recipe_json("7", isFavorite=True)))
        gateway = make_gateway(log)

        result = await gateway.set_favorite("7", True)

        request = log.requests[0]
        assert request.method == "PATCH"
        assert request.url.path == "/api/recipes/7/favorite"
        assert json.loads(request.content) == {"isFavorite": True}
        assert result.is_favorite is True

    @pytest.mark.asyncio
    async def test_delete(self) -> None:
        log = RequestLog(httpx.Response(204))
        gateway = make_gateway(log)

        await gateway.delete_recipe("7")

        assert log.requests[0].method == "DELETE"
        assert log.requests[0].url.path == "/api/recipes/7"

    @pytest.mark.asyncio
    async def test_delete_not_found_raises(self) -> None:
        gateway = make_gateway(RequestLog(httpx.Response(404)))

        with pytest.raises(TransportError) as exc_info:
            await gateway.delete_recipe("7")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_ids_are_escaped_in_path(self) -> None:
        log = RequestLog(httpx.Response(204))
        gateway = make_gateway(log)

        await gateway.delete_recipe("a/b")

        assert log.requests[0].url.raw_path == b"/api/recipes/a%2Fb"


class TestClientLifecycle:
    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(RequestLog(httpx.Response(204))), base_url=BASE_URL)

        async with HttpRecipeGateway(BASE_URL, client=client):
            pass

        assert client.is_closed is False
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self) -> None:
        gateway = HttpRecipeGateway(BASE_URL)

        await gateway.aclose()

        assert gateway._client.is_closed is True
