import datetime
import typing
import sqlalchemy
import sqlalchemy.orm
from lectern.models.base import Base


class Book(Base):
    __tablename__ = "books"
    __table_args__ = (
        sqlalchemy.Index("idx_books_slug", "slug", unique=True),
        {"schema": "books"}
    )

    book_id: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.BigInteger, primary_key=True, autoincrement=True
    )
    title: sqlalchemy.orm.Mapped[str] = sqlalchemy.orm.mapped_column(
        sqlalchemy.String(500), nullable=False
    )
    slug: sqlalchemy.orm.Mapped[str] = sqlalchemy.orm.mapped_column(
        sqlalchemy.String(600), nullable=False
    )
    author_name: sqlalchemy.orm.Mapped[typing.Optional[str]] = sqlalchemy.orm.mapped_column(
        sqlalchemy.String(300), nullable=True
    )
    description: sqlalchemy.orm.Mapped[typing.Optional[str]] = sqlalchemy.orm.mapped_column(
        sqlalchemy.Text, nullable=True
    )
    created_at: sqlalchemy.orm.Mapped[datetime.datetime] = sqlalchemy.orm.mapped_column(
        sqlalchemy.DateTime, nullable=False, server_default=sqlalchemy.func.now()
    )
    updated_at: sqlalchemy.orm.Mapped[datetime.datetime] = sqlalchemy.orm.mapped_column(
        sqlalchemy.DateTime, nullable=False, server_default=sqlalchemy.func.now()
    )
