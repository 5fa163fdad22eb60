import typing
import pydantic


class ErrorDetail(pydantic.BaseModel):
    code: str
    message: str
    details: typing.Dict[str, typing.Any] = pydantic.Field(default_factory=dict)


class APIResponse(pydantic.BaseModel):
    success: bool
    data: typing.Optional[typing.Any] = None
    error: typing.Optional[ErrorDetail] = None

    model_config = pydantic.ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "data": {"key": "value"},
                "error": None
            }
        }
    )


class HealthResponse(pydantic.BaseModel):
    status: str
    service: str
    version: str
    timestamp: str


class DeepHealthResponse(pydantic.BaseModel):
    status: str
    service: str
    version: str
    timestamp: str
    dependencies: typing.Dict[str, str]


class CriterionScoresSchema(pydantic.BaseModel):
    enjoyment: float
    writing: float
    themes: float
    characters: float
    worldbuilding: float


class RatingSummarySchema(pydantic.BaseModel):
    averages: CriterionScoresSchema
    overall: float = pydantic.Field(description="Weighted overall score of the averaged criteria")
    rating_count: int


class TaxonomySchema(pydantic.BaseModel):
    taxonomy_id: int
    name: str
    slug: str
    type: str
    description: typing.Optional[str] = None
    rank: typing.Optional[int] = None


class BookDetailData(pydantic.BaseModel):
    book_id: int
    title: str
    slug: str
    author_name: str
    description: str
    created_at: str
    updated_at: str
    taxonomies: typing.List[TaxonomySchema] = pydantic.Field(default_factory=list)
    rating_summary: typing.Optional[RatingSummarySchema] = pydantic.Field(
        default=None, description="null when the book has no ratings yet"
    )


class BookDetailResponse(pydantic.BaseModel):
    success: bool = True
    data: BookDetailData
    error: typing.Optional[ErrorDetail] = None


class RatingSchema(pydantic.BaseModel):
    rating_id: int
    user_id: int
    book_id: int
    enjoyment: int
    writing: int
    themes: int
    characters: int
    worldbuilding: int
    review_text: typing.Optional[str] = None
    featured: bool
    report_status: str
    created_at: typing.Optional[str] = None
    updated_at: typing.Optional[str] = None
    weighted_rating: typing.Optional[float] = None


class RatingListData(pydantic.BaseModel):
    ratings: typing.List[RatingSchema]
    total_count: int
    filter: str
    weighted_with: str = pydantic.Field(description="'preferences' or 'defaults'")


class RatingListResponse(pydantic.BaseModel):
    success: bool = True
    data: RatingListData
    error: typing.Optional[ErrorDetail] = None


class DiscoverBookSchema(pydantic.BaseModel):
    book_id: int
    title: str
    slug: str
    author_name: str
    description: str
    created_at: str
    updated_at: str
    taxonomic_score: float
    matching_taxonomies: int


class DiscoverData(pydantic.BaseModel):
    view_id: int
    books: typing.List[DiscoverBookSchema]


class DiscoverResponse(pydantic.BaseModel):
    success: bool = True
    data: DiscoverData
    error: typing.Optional[ErrorDetail] = None
