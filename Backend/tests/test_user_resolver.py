import threading

import pytest
from sqlalchemy import func, select

from database import SessionLocal
from errors import ValidationError
from models import User
from user_resolver import Anonymous, Authenticated, resolve


def _user_count(db):
    return db.execute(select(func.count()).select_from(User)).scalar()


def test_guest_with_same_name_is_reused(db):
    first = resolve(db, Anonymous(), "Guest")
    second = resolve(db, Anonymous(), "  Guest ")

    assert first == second
    user = db.get(User, first)
    assert user.is_guest is True
    assert user.email is None
    assert user.display_name == "Guest"
    assert _user_count(db) == 1


def test_guest_without_name_gets_a_generated_identity(db):
    first = resolve(db, Anonymous())
    second = resolve(db, Anonymous(), "")

    assert first != second
    assert db.get(User, first).username.startswith("guest_")
    assert _user_count(db) == 2


def test_concurrent_guest_resolves_create_one_row():
    barrier = threading.Barrier(4)
    results = []

    def worker():
        session = SessionLocal()
        try:
            barrier.wait()
            results.append(resolve(session, Anonymous(), "Racer"))
        finally:
            session.close()

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 4
    assert len(set(results)) == 1
    check = SessionLocal()
    try:
        assert check.execute(select(func.count()).select_from(User).where(User.username == "Racer")).scalar() == 1
    finally:
        check.close()


def test_account_created_once_per_email(db):
    first = resolve(db, Authenticated(email="writer@example.com"), "Wordsmith")
    second = resolve(db, Authenticated(email="writer@example.com"), "Another Name")

    assert first == second
    user = db.get(User, first)
    assert user.is_guest is False
    assert user.username == "Wordsmith"
    assert user.guest_key is None


def test_account_defaults_to_email_as_username(db):
    user_id = resolve(db, Authenticated(email="anon@example.com"))

    user = db.get(User, user_id)
    assert user.username == "anon@example.com"
    assert user.display_name == "anon@example.com"


def test_account_and_guest_with_same_name_are_distinct(db):
    guest_id = resolve(db, Anonymous(), "Guest")
    account_id = resolve(db, Authenticated(email="me@example.com"), "Guest")

    assert guest_id != account_id
    assert resolve(db, Anonymous(), "Guest") == guest_id


def test_overlong_name_is_rejected(db):
    with pytest.raises(ValidationError):
        resolve(db, Anonymous(), "x" * 51)
    assert _user_count(db) == 0
