from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter

from recipebox.app.domain.models import Recipe, RecipeDraft, User


class UserPayload(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    username: str
    email: str

    @classmethod
    def from_domain(cls, user: User) -> UserPayload:
        return cls(id=user.id, username=user.username, email=user.email)

    def to_domain(self) -> User:
        return User(id=self.id, username=self.username, email=self.email)


class RecipeCreateRequest(BaseModel):
    title: str
    description: str = ""
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    prepTime: float = 0
    cookTime: float = 0
    servings: int = 1
    imageUrl: Optional[str] = None
    ownerId: str

    @classmethod
    def from_draft(cls, draft: RecipeDraft, owner_id: str) -> RecipeCreateRequest:
        return cls(
            title=draft.title,
            description=draft.description,
            ingredients=list(draft.ingredients),
            instructions=list(draft.instructions),
            prepTime=draft.prep_time,
            cookTime=draft.cook_time,
            servings=draft.servings,
            imageUrl=draft.image_url,
            ownerId=owner_id,
        )


class FavoriteRequest(BaseModel):
    isFavorite: bool


class RecipeResponse(BaseModel):
    """Recipe as exchanged with the remote collection and the local snapshot."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    title: str
    description: Optional[str] = ""
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    prepTime: float = Field(default=0, ge=0)
    cookTime: float = Field(default=0, ge=0)
    servings: int = Field(default=1, ge=1)
    imageUrl: Optional[str] = None
    # older backends name the owner "userId"
    ownerId: str = Field(validation_alias=AliasChoices("ownerId", "userId"))
    isFavorite: bool = False
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_domain(cls, recipe: Recipe) -> RecipeResponse:
        return cls(
            id=recipe.id,
            title=recipe.title,
            description=recipe.description,
            ingredients=list(recipe.ingredients),
            instructions=list(recipe.instructions),
            prepTime=recipe.prep_time,
            cookTime=recipe.cook_time,
            servings=recipe.servings,
            imageUrl=recipe.image_url,
            ownerId=recipe.owner_id,
            isFavorite=recipe.is_favorite,
            createdAt=recipe.created_at,
            updatedAt=recipe.updated_at,
        )

    def to_domain(self) -> Recipe:
        return Recipe(
            id=self.id,
            title=self.title,
            description=self.description or "",
            ingredients=list(self.ingredients),
            instructions=list(self.instructions),
            prep_time=self.prepTime,
            cook_time=self.cookTime,
            servings=self.servings,
            image_url=self.imageUrl,
            owner_id=self.ownerId,
            is_favorite=self.isFavorite,
            created_at=_as_utc(self.createdAt),
            updated_at=_as_utc(self.updatedAt),
        )


RecipeList = TypeAdapter(list[RecipeResponse])


def _as_utc(value: datetime) -> datetime:
    # naive timestamps from the server are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
