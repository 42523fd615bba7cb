from __future__ import annotations

from sqlalchemy import create_engine, pool

from alembic import context

from scoreline.database.schema import Base


config = context.config


def run_migrations() -> None:
    url = config.get_main_option("sqlalchemy.url")
    if not url:
        raise RuntimeError("sqlalchemy.url must be set for scoreline migrations (set by upgrade_database).")

    connectable = create_engine(url, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        # sqlite cannot ALTER most constraints in place
        context.configure(
            connection=connection,
            target_metadata=Base.metadata,
            render_as_batch=True,
        )
        with context.begin_transaction():
            context.run_migrations()


run_migrations()
