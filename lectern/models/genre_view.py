import datetime
import sqlalchemy
import sqlalchemy.orm
from lectern.models.base import Base


class GenreView(Base):
    __tablename__ = "genre_views"
    __table_args__ = (
        sqlalchemy.Index("idx_genre_views_user_id", "user_id"),
        {"schema": "books"}
    )

    view_id: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.BigInteger, primary_key=True, autoincrement=True
    )
    user_id: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.BigInteger, nullable=False
    )
    name: sqlalchemy.orm.Mapped[str] = sqlalchemy.orm.mapped_column(
        sqlalchemy.String(100), nullable=False
    )
    created_at: sqlalchemy.orm.Mapped[datetime.datetime] = sqlalchemy.orm.mapped_column(
        sqlalchemy.DateTime, nullable=False, server_default=sqlalchemy.func.now()
    )


class ViewTaxonomy(Base):
    __tablename__ = "view_taxonomies"
    __table_args__ = (
        sqlalchemy.CheckConstraint("importance > 0", name="check_view_taxonomy_importance"),
        {"schema": "books"}
    )

    view_id: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.BigInteger,
        sqlalchemy.ForeignKey("books.genre_views.view_id", ondelete="CASCADE"),
        primary_key=True
    )
    taxonomy_id: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.BigInteger,
        sqlalchemy.ForeignKey("books.genre_taxonomies.taxonomy_id", ondelete="CASCADE"),
        primary_key=True
    )
    rank: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.Integer, nullable=False
    )
    importance: sqlalchemy.orm.Mapped[float] = sqlalchemy.orm.mapped_column(
        sqlalchemy.Float, nullable=False, server_default=sqlalchemy.text("1.0")
    )
