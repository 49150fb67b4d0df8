from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
import json
import logging
from pathlib import Path
import sqlite3
from typing import Any, Iterator, Protocol, Sequence

from voice.models import ConversationContext, MasterProfile, utc_now
from voice.profile import MasterProfileManager

logger = logging.getLogger(__name__)


class ProfileVersionConflict(RuntimeError):
    pass


class ProfileStore(Protocol):
    def load(self, user_id: str) -> MasterProfile:
        ...

    def save(self, profile: MasterProfile) -> None:
        ...

    def record_messages(self, user_id: str, messages: Sequence[str]) -> int:
        ...


class SQLiteProfileStore:
    def __init__(
        self,
        db_path: str | Path,
        manager: MasterProfileManager | None = None,
        bootstrap_history_limit: int | None = None,
    ) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.manager = manager or MasterProfileManager()
        if bootstrap_history_limit is None:
            bootstrap_history_limit = self.manager.settings.bootstrap_history_limit
        self.bootstrap_history_limit = bootstrap_history_limit
        self._initialize()

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path), timeout=30)
        conn.execute("PRAGMA busy_timeout=30000;")
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _initialize(self) -> None:
        with self.connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS profiles (
                    user_id TEXT PRIMARY KEY,
                    version INTEGER NOT NULL,
                    document TEXT NOT NULL,
                    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                );

                CREATE TABLE IF NOT EXISTS message_history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    content TEXT NOT NULL,
                    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                );

                CREATE INDEX IF NOT EXISTS idx_history_user ON message_history(user_id, id);
                """
            )
            conn.commit()

    def load(self, user_id: str, now: datetime | None = None) -> MasterProfile:
        document = self._fetch_document(user_id)
        if document is None:
            profile = self.bootstrap(user_id, now=now)
            self.save(profile)
            return profile

        if int(document.get("version") or 0) < 1:
            profile = self._migrate_legacy(user_id, document, now=now)
            self.save(profile)
            return profile

        profile = MasterProfile.from_dict(document)
        logger.debug("Profile loaded user=%s version=%s", user_id, profile.version)
        return profile

    def save(self, profile: MasterProfile) -> None:
        document = json.dumps(profile.to_dict(), ensure_ascii=False)
        with self.connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute("SELECT version FROM profiles WHERE user_id = ?", (profile.user_id,)).fetchone()
            if row is not None and int(row["version"]) != profile.version - 1:
                conn.rollback()
                raise ProfileVersionConflict(
                    f"Stale profile for {profile.user_id}: stored version {row['version']}, "
                    f"attempted version {profile.version}"
                )
            conn.execute(
                """
                INSERT INTO profiles(user_id, version, document, updated_at)
                VALUES (?, ?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(user_id) DO UPDATE SET
                    version = excluded.version,
                    document = excluded.document,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (profile.user_id, profile.version, document),
            )
            conn.commit()
        logger.info("Profile saved user=%s version=%s", profile.user_id, profile.version)

    def bootstrap(self, user_id: str, now: datetime | None = None) -> MasterProfile:
        now = now or utc_now()
        profile = self.manager.create_new_profile(user_id, now=now)
        history = self.fetch_recent_messages(user_id, limit=self.bootstrap_history_limit)
        if not history:
            logger.info("New profile created user=%s", user_id)
            return profile

        logger.info("Bootstrapping profile user=%s from %s history messages", user_id, len(history))
        return self.manager.update_from_conversation(
            profile,
            history,
            [],
            ConversationContext(conversation_length=len(history), is_first_time=False),
            now=now,
        )

    def _migrate_legacy(self, user_id: str, document: dict[str, Any], now: datetime | None = None) -> MasterProfile:
        legacy = MasterProfile.from_dict({**document, "user_id": user_id})
        profile = self.manager.create_new_profile(user_id, now=now)
        profile.business_profile = legacy.business_profile
        profile.writing_style = legacy.writing_style
        logger.info("Migrated legacy profile user=%s from version %s", user_id, legacy.version)
        return profile

    def _fetch_document(self, user_id: str) -> dict[str, Any] | None:
        with self.connect() as conn:
            row = conn.execute("SELECT version, document FROM profiles WHERE user_id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        document = json.loads(row["document"])
        document.setdefault("version", row["version"])
        return document

    def record_messages(self, user_id: str, messages: Sequence[str]) -> int:
        rows = [(user_id, message) for message in messages if message.strip()]
        if not rows:
            return 0
        with self.connect() as conn:
            conn.executemany("INSERT INTO message_history(user_id, content) VALUES (?, ?)", rows)
            conn.commit()
        return len(rows)

    def fetch_recent_messages(self, user_id: str, limit: int = 100) -> list[str]:
        if limit <= 0:
            return []
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT content FROM message_history WHERE user_id = ? ORDER BY id DESC LIMIT ?",
                (user_id, limit),
            ).fetchall()
        return [row["content"] for row in reversed(rows)]

    def list_user_ids(self) -> list[str]:
        with self.connect() as conn:
            rows = conn.execute(
                """
                SELECT user_id FROM profiles
                UNION
                SELECT DISTINCT user_id FROM message_history
                ORDER BY user_id
                """
            ).fetchall()
        return [row["user_id"] for row in rows]
