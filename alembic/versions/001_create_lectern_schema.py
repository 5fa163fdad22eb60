"""create books and user_data schemas

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from alembic import op

revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute('CREATE SCHEMA IF NOT EXISTS books')
    op.execute('CREATE SCHEMA IF NOT EXISTS user_data')

    op.execute("""
        CREATE TABLE IF NOT EXISTS books.books (
            book_id         BIGSERIAL PRIMARY KEY,
            title           VARCHAR(500) NOT NULL,
            slug            VARCHAR(600) NOT NULL,
            author_name     VARCHAR(300),
            description     TEXT,
            created_at      TIMESTAMP NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMP NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE UNIQUE INDEX IF NOT EXISTS idx_books_slug ON books.books (slug)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS books.genre_taxonomies (
            taxonomy_id     BIGSERIAL PRIMARY KEY,
            name            VARCHAR(100) NOT NULL,
            slug            VARCHAR(150) NOT NULL,
            type            VARCHAR(20) NOT NULL,
            description     TEXT,
            created_at      TIMESTAMP NOT NULL DEFAULT NOW(),
            CONSTRAINT check_genre_taxonomy_type
                CHECK (type IN ('genre', 'subgenre', 'theme', 'trope'))
        )
    """)
    op.execute("CREATE UNIQUE INDEX IF NOT EXISTS idx_genre_taxonomies_slug ON books.genre_taxonomies (slug)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS books.book_taxonomies (
            book_id         BIGINT NOT NULL REFERENCES books.books (book_id) ON DELETE CASCADE,
            taxonomy_id     BIGINT NOT NULL REFERENCES books.genre_taxonomies (taxonomy_id) ON DELETE CASCADE,
            rank            INTEGER NOT NULL DEFAULT 1,
            PRIMARY KEY (book_id, taxonomy_id),
            CONSTRAINT check_book_taxonomy_rank CHECK (rank >= 1)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_book_taxonomies_taxonomy_id ON books.book_taxonomies (taxonomy_id)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS books.genre_views (
            view_id         BIGSERIAL PRIMARY KEY,
            user_id         BIGINT NOT NULL,
            name            VARCHAR(100) NOT NULL,
            created_at      TIMESTAMP NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_genre_views_user_id ON books.genre_views (user_id)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS books.view_taxonomies (
            view_id         BIGINT NOT NULL REFERENCES books.genre_views (view_id) ON DELETE CASCADE,
            taxonomy_id     BIGINT NOT NULL REFERENCES books.genre_taxonomies (taxonomy_id) ON DELETE CASCADE,
            rank            INTEGER NOT NULL,
            importance      DOUBLE PRECISION NOT NULL DEFAULT 1.0,
            PRIMARY KEY (view_id, taxonomy_id),
            CONSTRAINT check_view_taxonomy_importance CHECK (importance > 0)
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS user_data.ratings (
            rating_id       BIGSERIAL PRIMARY KEY,
            user_id         BIGINT NOT NULL,
            book_id         BIGINT NOT NULL,
            enjoyment       SMALLINT NOT NULL,
            writing         SMALLINT NOT NULL,
            themes          SMALLINT NOT NULL,
            characters      SMALLINT NOT NULL,
            worldbuilding   SMALLINT NOT NULL,
            review_text     TEXT,
            featured        BOOLEAN NOT NULL DEFAULT FALSE,
            report_status   VARCHAR(20) NOT NULL DEFAULT 'none',
            created_at      TIMESTAMP NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMP NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_ratings_user_book UNIQUE (user_id, book_id),
            CONSTRAINT check_rating_criteria CHECK (
                enjoyment BETWEEN 1 AND 5
                AND writing BETWEEN 1 AND 5
                AND themes BETWEEN 1 AND 5
                AND characters BETWEEN 1 AND 5
                AND worldbuilding BETWEEN 1 AND 5
            )
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_ratings_book_id ON user_data.ratings (book_id)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS user_data.rating_preferences (
            user_id         BIGINT PRIMARY KEY,
            enjoyment       DECIMAL(4,3),
            writing         DECIMAL(4,3),
            themes          DECIMAL(4,3),
            characters      DECIMAL(4,3),
            worldbuilding   DECIMAL(4,3),
            criteria_order  JSONB,
            created_at      TIMESTAMP NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMP NOT NULL DEFAULT NOW()
        )
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS user_data.rating_preferences")
    op.execute("DROP TABLE IF EXISTS user_data.ratings")
    op.execute("DROP TABLE IF EXISTS books.view_taxonomies")
    op.execute("DROP TABLE IF EXISTS books.genre_views")
    op.execute("DROP TABLE IF EXISTS books.book_taxonomies")
    op.execute("DROP TABLE IF EXISTS books.genre_taxonomies")
    op.execute("DROP TABLE IF EXISTS books.books")
