"""Local user mirror, signed-in identity and key/value settings."""
import logging
from datetime import datetime

from flashquiz.db import get_connection
from flashquiz.exceptions import WebhookPayloadError
from flashquiz.models import User
from flashquiz.progress import delete_outcomes_for_user

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "current_user"


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def delete_setting(db_path: str, key: str) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM user_settings WHERE key = ?", (key,))
    conn.commit()
    conn.close()


# --- Users ---


def get_user(db_path: str, external_id: str) -> User | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM users WHERE external_id = ?", (external_id,)).fetchone()
    conn.close()
    return User.from_row(row) if row else None


def create_user(db_path: str, external_id: str, email: str) -> User:
    now = datetime.now().isoformat()
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO users (external_id, email, plan, created_at, updated_at) VALUES (?, ?, 'free', ?, ?)",
        (external_id.strip(), email.strip().lower(), now, now),
    )
    conn.commit()
    conn.close()
    return get_user(db_path, external_id.strip())


def upsert_user(db_path: str, external_id: str, email: str) -> User:
    """Create the user or update their email."""
    now = datetime.now().isoformat()
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO users (external_id, email, plan, created_at, updated_at)
        VALUES (?, ?, 'free', ?, ?)
        ON CONFLICT(external_id) DO UPDATE SET email = excluded.email, updated_at = excluded.updated_at""",
        (external_id.strip(), email.strip().lower(), now, now),
    )
    conn.commit()
    conn.close()
    return get_user(db_path, external_id.strip())


def delete_user(db_path: str, external_id: str) -> bool:
    """Delete the user together with their flashcard progress."""
    removed = delete_outcomes_for_user(db_path, external_id)
    conn = get_connection(db_path)
    cursor = conn.execute("DELETE FROM users WHERE external_id = ?", (external_id,))
    conn.commit()
    deleted = cursor.rowcount > 0
    conn.close()
    if current_user_id(db_path) == external_id:
        sign_out(db_path)
    logger.info("Deleted user %s and %d progress records", external_id, removed)
    return deleted


# --- Identity ---


def current_user_id(db_path: str) -> str | None:
    return get_setting(db_path, CURRENT_USER_KEY) or None


def sign_in(db_path: str, external_id: str) -> bool:
    if get_user(db_path, external_id) is None:
        return False
    set_setting(db_path, CURRENT_USER_KEY, external_id)
    return True


def sign_out(db_path: str) -> None:
    delete_setting(db_path, CURRENT_USER_KEY)


# --- Lifecycle events ---


def _primary_email(data: dict) -> str | None:
    addresses = data.get("email_addresses") or []
    if not addresses:
        return None
    return addresses[0].get("email_address")


def apply_user_event(db_path: str, event: dict) -> str:
    """Mirror a user.created / user.updated / user.deleted event locally.

    Returns the event type that was applied, or "ignored".
    """
    event_type = event.get("type")
    data = event.get("data") or {}
    external_id = data.get("id")
    logger.info("Identity event %s for %s", event_type, external_id)

    if event_type in ("user.created", "user.updated"):
        email = _primary_email(data)
        if not external_id or not email:
            raise WebhookPayloadError(f"Missing user id or email in {event_type} payload.")
        if event_type == "user.created":
            create_user(db_path, external_id, email)
        else:
            upsert_user(db_path, external_id, email)
        return event_type
    if event_type == "user.deleted":
        if not external_id:
            raise WebhookPayloadError("Missing user id in user.deleted payload.")
        delete_user(db_path, external_id)
        return event_type

    logger.warning("Ignoring unsupported identity event type: %s", event_type)
    return "ignored"
