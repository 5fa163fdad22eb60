import datetime
import typing
import sqlalchemy
import sqlalchemy.orm
from lectern.models.base import Base


class GenreTaxonomy(Base):
    __tablename__ = "genre_taxonomies"
    __table_args__ = (
        sqlalchemy.Index("idx_genre_taxonomies_slug", "slug", unique=True),
        sqlalchemy.CheckConstraint(
            "type IN ('genre', 'subgenre', 'theme', 'trope')",
            name="check_genre_taxonomy_type"
        ),
        {"schema": "books"}
    )

    taxonomy_id: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.BigInteger, primary_key=True, autoincrement=True
    )
    name: sqlalchemy.orm.Mapped[str] = sqlalchemy.orm.mapped_column(
        sqlalchemy.String(100), nullable=False
    )
    slug: sqlalchemy.orm.Mapped[str] = sqlalchemy.orm.mapped_column(
        sqlalchemy.String(150), nullable=False
    )
    type: sqlalchemy.orm.Mapped[str] = sqlalchemy.orm.mapped_column(
        sqlalchemy.String(20), nullable=False
    )
    description: sqlalchemy.orm.Mapped[typing.Optional[str]] = sqlalchemy.orm.mapped_column(
        sqlalchemy.Text, nullable=True
    )
    created_at: sqlalchemy.orm.Mapped[datetime.datetime] = sqlalchemy.orm.mapped_column(
        sqlalchemy.DateTime, nullable=False, server_default=sqlalchemy.func.now()
    )


class BookTaxonomy(Base):
    __tablename__ = "book_taxonomies"
    __table_args__ = (
        sqlalchemy.Index("idx_book_taxonomies_taxonomy_id", "taxonomy_id"),
        sqlalchemy.CheckConstraint("rank >= 1", name="check_book_taxonomy_rank"),
        {"schema": "books"}
    )

    book_id: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.BigInteger,
        sqlalchemy.ForeignKey("books.books.book_id", ondelete="CASCADE"),
        primary_key=True
    )
    taxonomy_id: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.BigInteger,
        sqlalchemy.ForeignKey("books.genre_taxonomies.taxonomy_id", ondelete="CASCADE"),
        primary_key=True
    )
    rank: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.Integer, nullable=False, server_default=sqlalchemy.text("1")
    )
