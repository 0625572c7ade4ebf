"""Tests for database migrations utilities."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from app.db import migrations
from app.db.migrations import PROJECT_ROOT, run_migrations


def test_alembic_config_points_at_project_scripts() -> None:
    cfg = migrations._alembic_config()

    assert cfg.get_main_option("script_location") == str(PROJECT_ROOT / "alembic")
    assert (PROJECT_ROOT / "alembic" / "versions").is_dir()


def test_run_migrations_upgrades_when_behind() -> None:
    with patch("app.db.migrations._is_at_head", return_value=False):
        with patch("app.db.migrations.command") as mock_command:
            run_migrations()

            mock_command.upgrade.assert_called_once()
            assert mock_command.upgrade.call_args[0][1] == "heads"


def test_run_migrations_skips_when_at_head() -> None:
    with patch("app.db.migrations._is_at_head", return_value=True):
        with patch("app.db.migrations.command") as mock_command:
            run_migrations()

            mock_command.upgrade.assert_not_called()


def test_run_migrations_upgrades_when_revision_unreadable() -> None:
    error = OperationalError("SELECT", {}, Exception("no table"))
    with patch("app.db.migrations._is_at_head", side_effect=error):
        with patch("app.db.migrations.command") as mock_command:
            run_migrations()

            mock_command.upgrade.assert_called_once()


def test_run_migrations_propagates_upgrade_failure() -> None:
    with patch("app.db.migrations._is_at_head", return_value=False):
        with patch("app.db.migrations.command") as mock_command:
            mock_command.upgrade.side_effect = RuntimeError("Migration failed")

            with pytest.raises(RuntimeError, match="Migration failed"):
                run_migrations()


def test_is_at_head_compares_database_and_script_heads() -> None:
    with patch("app.db.migrations.ScriptDirectory") as mock_script_dir:
        with patch("app.db.migrations.MigrationContext") as mock_context:
            with patch("app.db.session.engine") as mock_engine:
                mock_script_dir.from_config.return_value.get_heads.return_value = ["202610170900"]
                mock_engine.connect.return_value = MagicMock()
                mock_context.configure.return_value.get_current_heads.return_value = ("202610170900",)

                assert migrations._is_at_head(MagicMock()) is True

                mock_context.configure.return_value.get_current_heads.return_value = ()
                assert migrations._is_at_head(MagicMock()) is False
