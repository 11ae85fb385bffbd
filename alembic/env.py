import sys
from pathlib import Path
from logging.config import fileConfig

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context

# Proje kokunu Python path'e ekle (import'larin calismasi icin)
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from teklifsatis.database import Base
from teklifsatis.config import settings
import teklifsatis.models  # noqa: F401 - Tum modellerin yuklenmesi icin

config = context.config

# Veritabani adresi alembic.ini yerine uygulama ayarlarindan alinir
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# SQLite ALTER TABLE kisitli; tablo kopyalama (batch) modu gerekir
_is_sqlite = settings.DATABASE_URL.startswith("sqlite")


def run_migrations_offline() -> None:
    context.configure(
        url=settings.DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=_is_sqlite,
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
            # Numeric hassasiyeti degisiklikleri de algilansin
            compare_type=True,
            render_as_batch=_is_sqlite,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
