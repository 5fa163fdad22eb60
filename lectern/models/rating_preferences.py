import datetime
import typing
import sqlalchemy
import sqlalchemy.dialects.postgresql
import sqlalchemy.orm
from lectern.models.base import Base


class RatingPreferences(Base):
    __tablename__ = "rating_preferences"
    __table_args__ = (
        {"schema": "user_data"},
    )

    user_id: sqlalchemy.orm.Mapped[int] = sqlalchemy.orm.mapped_column(
        sqlalchemy.BigInteger, primary_key=True
    )
    enjoyment: sqlalchemy.orm.Mapped[typing.Optional[float]] = sqlalchemy.orm.mapped_column(
        sqlalchemy.Numeric(4, 3), nullable=True
    )
    writing: sqlalchemy.orm.Mapped[typing.Optional[float]] = sqlalchemy.orm.mapped_column(
        sqlalchemy.Numeric(4, 3), nullable=True
    )
    themes: sqlalchemy.orm.Mapped[typing.Optional[float]] = sqlalchemy.orm.mapped_column(
        sqlalchemy.Numeric(4, 3), nullable=True
    )
    characters: sqlalchemy.orm.Mapped[typing.Optional[float]] = sqlalchemy.orm.mapped_column(
        sqlalchemy.Numeric(4, 3), nullable=True
    )
    worldbuilding: sqlalchemy.orm.Mapped[typing.Optional[float]] = sqlalchemy.orm.mapped_column(
        sqlalchemy.Numeric(4, 3), nullable=True
    )
    criteria_order: sqlalchemy.orm.Mapped[typing.Optional[typing.List[str]]] = sqlalchemy.orm.mapped_column(
        sqlalchemy.dialects.postgresql.JSONB, nullable=True
    )
    created_at: sqlalchemy.orm.Mapped[datetime.datetime] = sqlalchemy.orm.mapped_column(
        sqlalchemy.DateTime, nullable=False, server_default=sqlalchemy.func.now()
    )
    updated_at: sqlalchemy.orm.Mapped[datetime.datetime] = sqlalchemy.orm.mapped_column(
        sqlalchemy.DateTime, nullable=False, server_default=sqlalchemy.func.now()
    )
