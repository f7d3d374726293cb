"""Alembic migration environment.

Reads GREDA_DATABASE_URL_SYNC (or GREDA_DATABASE_URL, with the asyncpg
driver stripped) from the environment when set.
"""
import os
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

from greda_gbc.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

db_url = os.environ.get("GREDA_DATABASE_URL_SYNC") or os.environ.get("GREDA_DATABASE_URL", "")
if db_url:
    config.set_main_option("sqlalchemy.url", db_url.replace("postgresql+asyncpg://", "postgresql://"))

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
