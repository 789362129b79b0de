# tests/services/test_migrations.py
from __future__ import annotations

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from adages_society.db.session import Base
from adages_society.scripts.migrate import MIGRATIONS_DIR


def _alembic_config(url: str) -> Config:
    cfg = Config(f"{MIGRATIONS_DIR}/alembic.ini")
    cfg.set_main_option("script_location", MIGRATIONS_DIR)
    cfg.set_main_option("sqlalchemy.url", url)
    return cfg


def test_upgrade_head_builds_model_tables(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("ALEMBIC_URL", raising=False)
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    cfg = _alembic_config(url)
    engine = create_engine(url)

    command.upgrade(cfg, "head")
    inspector = inspect(engine)
    assert set(inspector.get_table_names()) - {"alembic_version"} == set(Base.metadata.tables)
    for name in ("adage_variants", "adage_timeline", "related_adages", "message_replies"):
        migrated = {column["name"] for column in inspector.get_columns(name)}
        assert migrated == set(Base.metadata.tables[name].columns.keys())

    command.downgrade(cfg, "5b1f2c9d7a40")
    assert "adage_variants" not in inspect(engine).get_table_names()
    assert "adages" in inspect(engine).get_table_names()

    command.downgrade(cfg, "base")
    assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
    engine.dispose()
