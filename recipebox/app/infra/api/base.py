# recipebox/app/infra/api/base.py
"""
Abstract interface for the remote recipe collection.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from recipebox.app.domain.models import Recipe, RecipeDraft


class RecipeGateway(ABC):
    """
    Remote source of truth for recipes.

    Implementations raise TransportError for any failed or rejected call.

    Implementations:
    - HttpRecipeGateway: REST collection over httpx
    """

    @abstractmethod
    async def list_recipes(self) -> list[Recipe]:
        """
        Fetch the full recipe collection.

        Returns:
            Recipes in server order
        """
        pass

    @abstractmethod
    async def create_recipe(self, draft: RecipeDraft, owner_id: str) -> Recipe:
        """
        Create a recipe. The server assigns id and timestamps.

        Args:
            draft: Caller-supplied fields
            owner_id: Id of the creating user

        Returns:
            The created Recipe as stored by the server
        """
        pass

    @abstractmethod
    async def update_recipe(self, recipe: Recipe) -> Recipe:
        """
        Replace a recipe with the merged record.

        Args:
            recipe: Full merged record, keyed by recipe.id

        Returns:
            The updated Recipe as stored by the server
        """
        pass

    @abstractmethod
    async def set_favorite(self, recipe_id: str, is_favorite: bool) -> Recipe:
        """
        Partial update of the favorite flag.

        Args:
            recipe_id: Recipe to update
            is_favorite: New flag value

        Returns:
            The updated Recipe as stored by the server
        """
        pass

    @abstractmethod
    async def delete_recipe(self, recipe_id: str) -> None:
        """
        Delete a recipe.

        Args:
            recipe_id: Recipe to delete
        """
        pass

    async def aclose(self) -> None:
        """Release network resources. No-op by default."""
        return None
