"""
Credential and session store for the reference server.

Plain sqlite3 with ``sqlite3.Row`` rows. Passwords are stored as salted
PBKDF2-SHA256 digests; session tokens are 64 hex characters.
"""
import hashlib
import hmac
import logging
import secrets
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger("sast.server.database")

PBKDF2_ITERATIONS = 120_000
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

PathLike = Union[str, Path]


def get_connection(db_path: PathLike) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: PathLike) -> None:
    """Create the users and sessions tables if they do not exist."""
    path = Path(db_path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)

    with get_connection(path) as conn:
        cursor = conn.cursor()
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                username TEXT UNIQUE NOT NULL,
                email TEXT UNIQUE NOT NULL,
                password_hash TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        ''')
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS sessions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                token TEXT UNIQUE NOT NULL,
                expires_at TEXT NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
            )
        ''')
        conn.commit()
    logger.info(f"Auth database ready at {path}")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _stamp(moment: datetime) -> str:
    return moment.strftime(TIMESTAMP_FORMAT)


# =============================================================================
# Passwords
# =============================================================================

def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt), PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        _, iterations, salt, expected = stored.split("$")
        digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt), int(iterations))
    except ValueError:
        return False
    return hmac.compare_digest(digest.hex(), expected)


# =============================================================================
# Users
# =============================================================================

def user_exists(db_path: PathLike, username: str, email: str) -> bool:
    with get_connection(db_path) as conn:
        row = conn.execute(
            "SELECT 1 FROM users WHERE email = ? OR username = ?", (email, username)
        ).fetchone()
    return row is not None


def create_user(db_path: PathLike, username: str, email: str, password: str) -> int:
    with get_connection(db_path) as conn:
        cursor = conn.execute(
            "INSERT INTO users (username, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
            (username, email, hash_password(password), _stamp(_now())),
        )
        conn.commit()
        return cursor.lastrowid


def authenticate(db_path: PathLike, email: str, password: str) -> Optional[sqlite3.Row]:
    """The user row for ``email`` when ``password`` matches, else None."""
    with get_connection(db_path) as conn:
        user = conn.execute(
            "SELECT id, username, email, password_hash FROM users WHERE email = ?", (email,)
        ).fetchone()
    if user is None or not verify_password(password, user["password_hash"]):
        return None
    return user


# =============================================================================
# Sessions
# =============================================================================

def create_session(db_path: PathLike, user_id: int, ttl_hours: int = 24) -> str:
    token = secrets.token_hex(32)
    expires_at = _stamp(_now() + timedelta(hours=ttl_hours))
    with get_connection(db_path) as conn:
        conn.execute(
            "INSERT INTO sessions (user_id, token, expires_at) VALUES (?, ?, ?)",
            (user_id, token, expires_at),
        )
        conn.commit()
    return token


def session_user(db_path: PathLike, token: str) -> Optional[sqlite3.Row]:
    """User joined to an unexpired session for ``token``."""
    with get_connection(db_path) as conn:
        return conn.execute(
            """
            SELECT u.id, u.username, u.email
            FROM sessions s JOIN users u ON s.user_id = u.id
            WHERE s.token = ? AND s.expires_at > ?
            """,
            (token, _stamp(_now())),
        ).fetchone()


def delete_session(db_path: PathLike, token: str) -> None:
    with get_connection(db_path) as conn:
        conn.execute("DELETE FROM sessions WHERE token = ?", (token,))
        conn.commit()
