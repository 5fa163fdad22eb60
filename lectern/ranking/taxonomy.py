"""Rank candidate books by how well their taxonomy terms match a selection."""
import dataclasses
import typing

TAXONOMY_TYPES: typing.Tuple[str, ...] = ("genre", "subgenre", "theme", "trope")


@dataclasses.dataclass(frozen=True)
class SelectedTerm:
    taxonomy_id: int
    importance: float = 1.0


@dataclasses.dataclass(frozen=True)
class BookTerm:
    taxonomy_id: int
    rank: int


@dataclasses.dataclass
class CandidateBook:
    book_id: int
    terms: typing.List[BookTerm] = dataclasses.field(default_factory=list)
    payload: typing.Any = None


@dataclasses.dataclass
class RankedBook:
    candidate: CandidateBook
    taxonomic_score: float
    matching_taxonomies: int


def _score(
    candidate: CandidateBook,
    importance_by_id: typing.Dict[int, float]
) -> RankedBook:
    score = 0.0
    matching = 0
    for term in candidate.terms:
        importance = importance_by_id.get(term.taxonomy_id)
        if importance is None:
            continue
        matching += 1
        score += importance / max(term.rank, 1)
    return RankedBook(candidate=candidate, taxonomic_score=score, matching_taxonomies=matching)


def _unranked(books: typing.Sequence[CandidateBook]) -> typing.List[RankedBook]:
    return [RankedBook(candidate=book, taxonomic_score=0.0, matching_taxonomies=0) for book in books]


def rank_books_by_taxonomy(
    books: typing.Sequence[CandidateBook],
    selected_terms: typing.Sequence[SelectedTerm]
) -> typing.List[RankedBook]:
    """Score and order ``books`` against ``selected_terms``.

    A matching term contributes ``importance / rank``, so a hit on a book's
    primary genre outweighs the same hit on a minor trope. Results are sorted
    by score, then by number of matching terms, then by input order.

    Books without any match are dropped. If that would leave nothing, every
    book is returned unranked in input order instead. With no selected terms
    at all the input comes back unranked and unchanged in order.
    """
    if not books:
        return []
    if not selected_terms:
        return _unranked(books)

    importance_by_id = {term.taxonomy_id: term.importance for term in selected_terms}

    scored = [_score(book, importance_by_id) for book in books]
    matched = [ranked for ranked in scored if ranked.matching_taxonomies > 0]
    if not matched:
        return _unranked(books)

    return sorted(matched, key=lambda r: (-r.taxonomic_score, -r.matching_taxonomies))


def taxonomy_sort_key(taxonomy_type: str, rank: int) -> typing.Tuple[int, int]:
    """Order a book's terms: genres before subgenres, themes, tropes; then by rank."""
    try:
        priority = TAXONOMY_TYPES.index(taxonomy_type)
    except ValueError:
        priority = len(TAXONOMY_TYPES)
    return priority, rank
