from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from cotizador.database import Base, database_url
from cotizador import models  # noqa: F401  registers tables on Base.metadata

config = context.config

# Only configure logging when run from the alembic CLI; the app has its own setup
if config.config_file_name is not None and config.cmd_opts is not None:
    fileConfig(config.config_file_name)

# Same URL the app uses (DATABASE_URL); % must be escaped for configparser
config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
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
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
