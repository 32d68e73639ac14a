# recipebox/app/infra/api/http_gateway.py
"""
REST implementation of the recipe collection using httpx.
"""
from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from recipebox.app.domain.errors import TransportError
from recipebox.app.domain.models import Recipe, RecipeDraft
from recipebox.app.infra.api.base import RecipeGateway
from recipebox.app.schemas.recipes import (
    FavoriteRequest,
    RecipeCreateRequest,
    RecipeList,
    RecipeResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_PATH = "/api/recipes"


class HttpRecipeGateway(RecipeGateway):
    """
    Talks to a REST collection:

    - GET    {path}                 list
    - POST   {path}                 create
    - PUT    {path}/{id}            update
    - PATCH  {path}/{id}/favorite   toggle favorite
    - DELETE {path}/{id}            delete
    """

    def __init__(
        self,
        base_url: str,
        collection_path: str = DEFAULT_COLLECTION_PATH,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.collection_path = "/" + collection_path.strip("/")
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

        logger.info(
            "HttpRecipeGateway initialized: base_url=%s, path=%s",
            self.base_url,
            self.collection_path,
        )

    async def __aenter__(self) -> HttpRecipeGateway:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _item_path(self, recipe_id: str) -> str:
        return f"{self.collection_path}/{quote(recipe_id, safe='')}"

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, path, json=json)
            response.raise_for_status()
            return response
        except httpx.TimeoutException as error:
            raise TransportError(operation, f"timeout after {self.timeout}s") from error
        except httpx.HTTPStatusError as error:
            status_code = error.response.status_code
            raise TransportError(operation, f"HTTP {status_code}", status_code=status_code) from error
        except httpx.HTTPError as error:
            raise TransportError(operation, str(error) or type(error).__name__) from error

    @staticmethod
    def _parse_recipe(operation: str, response: httpx.Response) -> Recipe:
        try:
            return RecipeResponse.model_validate(response.json()).to_domain()
        except ValueError as error:
            raise TransportError(operation, f"invalid response body: {error}") from error

    async def list_recipes(self) -> list[Recipe]:
        response = await self._request("list recipes", "GET", self.collection_path)
        try:
            items = RecipeList.validate_python(response.json())
        except ValueError as error:
            raise TransportError("list recipes", f"invalid response body: {error}") from error
        logger.debug("Fetched %d recipes", len(items))
        return [item.to_domain() for item in items]

    async def create_recipe(self, draft: RecipeDraft, owner_id: str) -> Recipe:
        payload = RecipeCreateRequest.from_draft(draft, owner_id)
        response = await self._request(
            "create recipe",
            "POST",
            self.collection_path,
            json=payload.model_dump(mode="json"),
        )
        return self._parse_recipe("create recipe", response)

    async def update_recipe(self, recipe: Recipe) -> Recipe:
        payload = RecipeResponse.from_domain(recipe)
        response = await self._request(
            "update recipe",
            "PUT",
            self._item_path(recipe.id),
            json=payload.model_dump(mode="json"),
        )
        return self._parse_recipe("update recipe", response)

    async def set_favorite(self, recipe_id: str, is_favorite: bool) -> Recipe:
        response = await self._request(
            "toggle favorite",
            "PATCH",
            f"{self._item_path(recipe_id)}/favorite",
            json=FavoriteRequest(isFavorite=is_favorite).model_dump(),
        )
        return self._parse_recipe("toggle favorite", response)

    async def delete_recipe(self, recipe_id: str) -> None:
        await self._request("delete recipe", "DELETE", self._item_path(recipe_id))
