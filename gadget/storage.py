"""
Storage layer for users, groups and group membership.

Uses SQLite for persistence. A new connection is opened per operation so
the store can be shared freely between the request thread and handler
tasks; consistency relies on SQLite transactions and unique indexes.
"""

import sqlite3
import logging
from pathlib import Path
from typing import Iterable, Optional
from contextlib import contextmanager

from .models import Group, User

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent.parent / "data"
DB_PATH = DATA_DIR / "gadget.db"


class UserStore:
    """Users, groups and memberships backed by a SQLite database file."""

    def __init__(self, db_path: Path | str | None = None):
        self.db_path = Path(db_path) if db_path is not None else DB_PATH
        self.init_database()

    @contextmanager
    def get_connection(self):
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path, timeout=30)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_database(self) -> None:
        """Initialize database with required tables."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    uuid TEXT NOT NULL UNIQUE,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS groups (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS user_groups (
                    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    group_id INTEGER NOT NULL REFERENCES groups(id) ON DELETE CASCADE,
                    PRIMARY KEY (user_id, group_id)
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_user_groups_group
                ON user_groups(group_id)
            """)

        logger.info(f"Database initialized at {self.db_path}")

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def find_or_create_user(self, uuid: str) -> User:
        """Get the user with the given Slack id, creating it on first contact."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("INSERT OR IGNORE INTO users (uuid) VALUES (?)", (uuid,))
            cursor.execute("SELECT id, uuid FROM users WHERE uuid = ?", (uuid,))
            row = cursor.fetchone()
            return User(id=row["id"], uuid=row["uuid"])

    def find_user(self, uuid: str) -> Optional[User]:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT id, uuid FROM users WHERE uuid = ?", (uuid,))
            row = cursor.fetchone()
            return User(id=row["id"], uuid=row["uuid"]) if row else None

    def groups_of(self, user: User) -> list[Group]:
        """Get every group the user belongs to, ordered by name."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT g.id, g.name FROM groups g
                JOIN user_groups ug ON ug.group_id = g.id
                WHERE ug.user_id = ?
                ORDER BY g.name
            """, (user.id,))
            return [Group(id=row["id"], name=row["name"]) for row in cursor.fetchall()]

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def find_or_create_group(self, name: str) -> Group:
        """Get the named group, creating it if needed."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("INSERT OR IGNORE INTO groups (name) VALUES (?)", (name,))
            cursor.execute("SELECT id, name FROM groups WHERE name = ?", (name,))
            row = cursor.fetchone()
            return Group(id=row["id"], name=row["name"])

    def find_group(self, name: str) -> Optional[Group]:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT id, name FROM groups WHERE name = ?", (name,))
            row = cursor.fetchone()
            return Group(id=row["id"], name=row["name"]) if row else None

    def all_groups(self) -> list[Group]:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT id, name FROM groups ORDER BY name")
            return [Group(id=row["id"], name=row["name"]) for row in cursor.fetchall()]

    def members_of(self, group: Group) -> list[User]:
        """Get the users in a group, ordered by Slack id."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT u.id, u.uuid FROM users u
                JOIN user_groups ug ON ug.user_id = u.id
                WHERE ug.group_id = ?
                ORDER BY u.uuid
            """, (group.id,))
            return [User(id=row["id"], uuid=row["uuid"]) for row in cursor.fetchall()]

    def add_member(self, group: Group, user: User) -> None:
        """Add a user to a group. Adding an existing member is a no-op."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT OR IGNORE INTO user_groups (user_id, group_id)
                VALUES (?, ?)
            """, (user.id, group.id))

    def remove_member(self, group: Group, user: User) -> bool:
        """
        Remove a user from a group.

        Returns:
            True if the user was a member, False otherwise
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                DELETE FROM user_groups WHERE user_id = ? AND group_id = ?
            """, (user.id, group.id))
            return cursor.rowcount > 0

    def replace_members(self, group: Group, users: Iterable[User]) -> None:
        """Make ``users`` the exact membership of ``group``."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM user_groups WHERE group_id = ?", (group.id,))
            cursor.executemany("""
                INSERT OR IGNORE INTO user_groups (user_id, group_id)
                VALUES (?, ?)
            """, [(user.id, group.id) for user in users])

    def sync_group(self, name: str, uuids: Iterable[str]) -> Group:
        """Find-or-create a group and set its members to the given Slack ids."""
        users = [self.find_or_create_user(uuid) for uuid in uuids]
        group = self.find_or_create_group(name)
        self.replace_members(group, users)
        logger.info(f"Synced group '{name}' with {len(users)} member(s)")
        return group
