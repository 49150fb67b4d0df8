from __future__ import annotations

from pathlib import Path

import pytest

from config.settings import Settings, ensure_directories


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    data_dir = tmp_path / "data"
    profiles_dir = data_dir / "profiles"
    value = Settings(
        project_root=tmp_path,
        data_dir=data_dir,
        profiles_dir=profiles_dir,
        sqlite_path=profiles_dir / "voice.db",
        export_dir=profiles_dir / "exports",
        locale="ko",
        style_window=50,
        style_update_policy="replace",
        evolution_interval_days=7.0,
        rewrite_seed=None,
        bootstrap_history_limit=100,
    )
    ensure_directories(value)
    return value
