from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

from dotenv import load_dotenv

STYLE_UPDATE_POLICIES = ("replace", "blend")


@dataclass(frozen=True)
class Settings:
    project_root: Path
    data_dir: Path
    profiles_dir: Path
    sqlite_path: Path
    export_dir: Path
    locale: str
    style_window: int
    style_update_policy: str
    evolution_interval_days: float
    rewrite_seed: int | None
    bootstrap_history_limit: int


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def _env_optional_int(name: str) -> int | None:
    value = os.getenv(name, "").strip()
    return int(value) if value else None


def _env_choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    value = os.getenv(name, "").strip().lower()
    return value if value in choices else default


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    project_root = Path(__file__).resolve().parents[1]
    load_dotenv(project_root / ".env")

    data_dir = project_root / "data"
    profiles_dir = data_dir / "profiles"

    settings = Settings(
        project_root=project_root,
        data_dir=data_dir,
        profiles_dir=profiles_dir,
        sqlite_path=profiles_dir / "voice.db",
        export_dir=profiles_dir / "exports",
        locale=os.getenv("VOICE_LOCALE", "ko").strip().lower() or "ko",
        style_window=max(1, _env_int("STYLE_WINDOW", 50)),
        style_update_policy=_env_choice("STYLE_UPDATE_POLICY", "replace", STYLE_UPDATE_POLICIES),
        evolution_interval_days=_env_float("EVOLUTION_INTERVAL_DAYS", 7.0),
        rewrite_seed=_env_optional_int("REWRITE_SEED"),
        bootstrap_history_limit=max(0, _env_int("BOOTSTRAP_HISTORY_LIMIT", 100)),
    )
    ensure_directories(settings)
    return settings


def ensure_directories(settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.profiles_dir.mkdir(parents=True, exist_ok=True)
    settings.export_dir.mkdir(parents=True, exist_ok=True)
