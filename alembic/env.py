import asyncio
from alembic import context
import sqlalchemy.pool
import sqlalchemy.ext.asyncio

config = context.config


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    engine = sqlalchemy.ext.asyncio.create_async_engine(
        config.get_main_option("sqlalchemy.url"),
        poolclass=sqlalchemy.pool.NullPool
    )
    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await engine.dispose()


def run_migrations_online() -> None:
    # Invoked from an executor thread by lectern.db.run_migrations, so no loop is running here.
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
