from lectern.models.base import Base
from lectern.models.book import Book
from lectern.models.taxonomy import GenreTaxonomy, BookTaxonomy
from lectern.models.genre_view import GenreView, ViewTaxonomy
from lectern.models.rating import Rating
from lectern.models.rating_preferences import RatingPreferences

__all__ = [
    "Base",
    "Book",
    "GenreTaxonomy",
    "BookTaxonomy",
    "GenreView",
    "ViewTaxonomy",
    "Rating",
    "RatingPreferences",
]
