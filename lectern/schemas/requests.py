import typing

import pydantic

import lectern.ranking.weighted_rating as weighted_rating

_TAXONOMY_TYPE_PATTERN = "^(genre|subgenre|theme|trope)$"


class RatingRequest(pydantic.BaseModel):
    enjoyment: int = pydantic.Field(ge=1, le=5)
    writing: int = pydantic.Field(ge=1, le=5)
    themes: int = pydantic.Field(ge=1, le=5)
    characters: int = pydantic.Field(ge=1, le=5)
    worldbuilding: int = pydantic.Field(ge=1, le=5)
    review_text: typing.Optional[str] = pydantic.Field(default=None, max_length=10000)

    model_config = pydantic.ConfigDict(
        json_schema_extra={
            "example": {
                "enjoyment": 5,
                "writing": 4,
                "themes": 4,
                "characters": 5,
                "worldbuilding": 3,
                "review_text": "Could not put it down.",
            }
        }
    )

    def scores(self) -> typing.Dict[str, int]:
        return {name: getattr(self, name) for name in weighted_rating.CRITERIA}


class FeaturedRequest(pydantic.BaseModel):
    featured: bool


class RatingPreferencesRequest(pydantic.BaseModel):
    enjoyment: typing.Optional[float] = pydantic.Field(default=None, ge=0.0, le=1.0)
    writing: typing.Optional[float] = pydantic.Field(default=None, ge=0.0, le=1.0)
    themes: typing.Optional[float] = pydantic.Field(default=None, ge=0.0, le=1.0)
    characters: typing.Optional[float] = pydantic.Field(default=None, ge=0.0, le=1.0)
    worldbuilding: typing.Optional[float] = pydantic.Field(default=None, ge=0.0, le=1.0)
    criteria_order: typing.Optional[typing.List[str]] = pydantic.Field(
        default=None,
        description="The five criteria, most important first",
    )

    model_config = pydantic.ConfigDict(
        json_schema_extra={
            "example": {
                "criteria_order": ["characters", "enjoyment", "writing", "themes", "worldbuilding"]
            }
        }
    )

    @pydantic.model_validator(mode="after")
    def check_weights_or_order(self) -> "RatingPreferencesRequest":
        provided = [getattr(self, name) for name in weighted_rating.CRITERIA]
        if any(v is not None for v in provided) and any(v is None for v in provided):
            raise ValueError("all five criterion weights must be given together")
        if self.criteria_order is None and all(v is None for v in provided):
            raise ValueError("either criterion weights or criteria_order is required")
        return self

    def weights(self) -> typing.Optional[weighted_rating.RatingWeights]:
        if self.enjoyment is None:
            return None
        return weighted_rating.RatingWeights.from_mapping(self.model_dump())


class TaxonomyCreateRequest(pydantic.BaseModel):
    name: str = pydantic.Field(min_length=1, max_length=100)
    type: str = pydantic.Field(pattern=_TAXONOMY_TYPE_PATTERN)
    description: typing.Optional[str] = None


class TaxonomyUpdateRequest(pydantic.BaseModel):
    name: typing.Optional[str] = pydantic.Field(default=None, min_length=1, max_length=100)
    type: typing.Optional[str] = pydantic.Field(default=None, pattern=_TAXONOMY_TYPE_PATTERN)
    description: typing.Optional[str] = None


class BookTaxonomyItem(pydantic.BaseModel):
    taxonomy_id: int = pydantic.Field(gt=0)
    rank: typing.Optional[int] = pydantic.Field(default=None, ge=1)


class BookTaxonomiesRequest(pydantic.BaseModel):
    taxonomies: typing.List[BookTaxonomyItem]


class ViewTaxonomyItem(pydantic.BaseModel):
    taxonomy_id: int = pydantic.Field(gt=0)
    importance: float = pydantic.Field(default=1.0, gt=0.0)


class GenreViewCreateRequest(pydantic.BaseModel):
    name: str = pydantic.Field(min_length=1, max_length=100)
    taxonomies: typing.List[ViewTaxonomyItem] = pydantic.Field(min_length=1)

    model_config = pydantic.ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Cozy fantasy",
                "taxonomies": [
                    {"taxonomy_id": 3, "importance": 1.0},
                    {"taxonomy_id": 17, "importance": 0.5},
                ],
            }
        }
    )
