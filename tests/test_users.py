import pytest

from flashquiz.db import init_db
from flashquiz.exceptions import WebhookPayloadError
from flashquiz.progress import find_outcomes, upsert_outcome
from flashquiz.users import (
    apply_user_event, create_user, current_user_id, delete_user, get_setting,
    get_user, set_setting, sign_in, sign_out, upsert_user,
)


def _event(event_type, user_id="user_1", email="Ada@Example.com"):
    data = {"id": user_id}
    if email:
        data["email_addresses"] = [{"email_address": email}]
    return {"type": event_type, "data": data}


def test_settings_roundtrip(tmp_db):
    init_db(tmp_db)
    assert get_setting(tmp_db, "theme") is None
    assert get_setting(tmp_db, "theme", "dark") == "dark"
    set_setting(tmp_db, "theme", "light")
    set_setting(tmp_db, "theme", "solarized")
    assert get_setting(tmp_db, "theme") == "solarized"


def test_create_user_defaults(tmp_db):
    init_db(tmp_db)
    user = create_user(tmp_db, "user_1", "Ada@Example.com")
    assert user.email == "ada@example.com"
    assert user.plan == "free"
    assert user.customer_id is None


def test_upsert_user_updates_email(tmp_db):
    init_db(tmp_db)
    create_user(tmp_db, "user_1", "old@example.com")
    user = upsert_user(tmp_db, "user_1", "new@example.com")
    assert user.email == "new@example.com"


def test_sign_in_requires_known_user(tmp_db):
    init_db(tmp_db)
    assert sign_in(tmp_db, "ghost") is False
    assert current_user_id(tmp_db) is None
    create_user(tmp_db, "user_1", "ada@example.com")
    assert sign_in(tmp_db, "user_1") is True
    assert current_user_id(tmp_db) == "user_1"
    sign_out(tmp_db)
    assert current_user_id(tmp_db) is None


def test_delete_user_removes_progress_and_signs_out(seeded_db):
    create_user(seeded_db, "user_1", "ada@example.com")
    sign_in(seeded_db, "user_1")
    upsert_outcome(seeded_db, "user_1", 1, "correct")
    assert delete_user(seeded_db, "user_1") is True
    assert get_user(seeded_db, "user_1") is None
    assert find_outcomes(seeded_db, "user_1", [1]) == []
    assert current_user_id(seeded_db) is None


def test_user_created_event(tmp_db):
    init_db(tmp_db)
    assert apply_user_event(tmp_db, _event("user.created")) == "user.created"
    assert get_user(tmp_db, "user_1").email == "ada@example.com"


def test_user_updated_event_creates_or_updates(tmp_db):
    init_db(tmp_db)
    apply_user_event(tmp_db, _event("user.updated", email="first@example.com"))
    apply_user_event(tmp_db, _event("user.updated", email="second@example.com"))
    assert get_user(tmp_db, "user_1").email == "second@example.com"


def test_user_deleted_event(seeded_db):
    apply_user_event(seeded_db, _event("user.created"))
    upsert_outcome(seeded_db, "user_1", 3, "incorrect")
    assert apply_user_event(seeded_db, _event("user.deleted", email=None)) == "user.deleted"
    assert get_user(seeded_db, "user_1") is None
    assert find_outcomes(seeded_db, "user_1", [3]) == []


def test_event_without_email_rejected(tmp_db):
    init_db(tmp_db)
    with pytest.raises(WebhookPayloadError):
        apply_user_event(tmp_db, _event("user.created", email=None))


def test_deleted_event_without_id_rejected(tmp_db):
    init_db(tmp_db)
    with pytest.raises(WebhookPayloadError):
        apply_user_event(tmp_db, {"type": "user.deleted", "data": {}})


def test_unknown_event_ignored(tmp_db):
    init_db(tmp_db)
    assert apply_user_event(tmp_db, {"type": "session.created", "data": {"id": "s"}}) == "ignored"
