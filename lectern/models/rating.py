import datetime
import typing
import sqlalchemy
import sqlalchemy.orm
from lectern.models.base import Base


class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (
        sqlalchemy.UniqueConstraint("user_id", "book_id", name="uq_ratings_user_book"),
        sqlalchemy.Index("idx_ratings_book_id", "book_id"),
        {"schema": "user_data"}
    )

    rating_id: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.BigInteger, primary_key=True
    )
    user_id: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.BigInteger, nullable=False
    )
    book_id: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.BigInteger, nullable=False
    )
    enjoyment: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.SmallInteger, nullable=False
    )
    writing: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.SmallInteger, nullable=False
    )
    themes: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.SmallInteger, nullable=False
    )
    characters: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.SmallInteger, nullable=False
    )
    worldbuilding: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.SmallInteger, nullable=False
    )
    review_text: sqlalchemy.orm.Mapped[typing.Optional[str]] = sqlalchemy.orm.mapped_column(
        sqlalchemy.Text, nullable=True
    )
    featured: sqlalchemy.orm.Mapped[bool] = sqlalchemy.orm.mapped_column(
        sqlalchemy.Boolean, nullable=False, server_default=sqlalchemy.false()
    )
    report_status: sqlalchemy.orm.Mapped[str] = sqlalchemy.orm.mapped_column(
        sqlalchemy.String(20), nullable=False, server_default="none"
    )
    created_at: sqlalchemy.orm.Mapped[datetime.datetime] = sqlalchemy.orm.mapped_column(
        sqlalchemy.DateTime, nullable=False, server_default=sqlalchemy.func.now()
    )
    updated_at: sqlalchemy.orm.Mapped[datetime.datetime] = sqlalchemy.orm.mapped_column(
        sqlalchemy.DateTime, nullable=False, server_default=sqlalchemy.func.now()
    )
