import sqlite3
import threading

import pytest

from flood_alert.adapters.sqlite_db import SQLiteSubscriberRepo
from flood_alert.components.subscribers import SubscriberConflictError, SubscriberNotFoundError
from flood_alert.core.ports.db import StoreError


def activate(repo: SQLiteSubscriberRepo, email: str):
    pending = repo.upsert_pending_signup(email)
    return repo.verify(pending.verification_token)


def test_signup_creates_pending_row(subscriber_repo):
    sub = subscriber_repo.upsert_pending_signup("rider@example.com")

    assert sub.email == "rider@example.com"
    assert not sub.is_verified and not sub.is_subscribed
    assert subscriber_repo.get_by_id(sub.id) == sub
    assert subscriber_repo.get_by_email("rider@example.com") == sub


def test_resignup_rotates_token_and_keeps_id(subscriber_repo):
    first = subscriber_repo.upsert_pending_signup("rider@example.com")
    second = subscriber_repo.upsert_pending_signup("rider@example.com")

    assert second.id == first.id
    assert second.created_at == first.created_at
    assert second.verification_token != first.verification_token


def test_signup_on_active_email_conflicts_without_change(subscriber_repo):
    active = activate(subscriber_repo, "rider@example.com")

    with pytest.raises(SubscriberConflictError):
        subscriber_repo.upsert_pending_signup("rider@example.com")

    assert subscriber_repo.get_by_id(active.id) == active


def test_verify_is_single_use(subscriber_repo):
    pending = subscriber_repo.upsert_pending_signup("rider@example.com")

    verified = subscriber_repo.verify(pending.verification_token)
    assert verified.is_verified and verified.is_subscribed

    with pytest.raises(SubscriberNotFoundError):
        subscriber_repo.verify(pending.verification_token)


def test_verify_unknown_token(subscriber_repo):
    with pytest.raises(SubscriberNotFoundError):
        subscriber_repo.verify("no-such-token")


def test_unsubscribe_clears_flag_and_keeps_row(subscriber_repo):
    """
    Unsubscribe policy: clear is_subscribed and keep the row.

    Deleting the row was the other option; it was rejected so a repeat click
    stays a no-op and a later signup reuses the same id.
    """
    active = activate(subscriber_repo, "rider@example.com")

    assert subscriber_repo.unsubscribe(active.id) is True
    assert subscriber_repo.unsubscribe(active.id) is False

    row = subscriber_repo.get_by_id(active.id)
    assert row is not None
    assert row.is_verified and not row.is_subscribed


def test_unsubscribe_unknown_id(subscriber_repo):
    assert subscriber_repo.unsubscribe("01926b8e-0000-7000-8000-000000000000") is False


def test_unsubscribed_email_can_restart_verification(subscriber_repo):
    active = activate(subscriber_repo, "rider@example.com")
    subscriber_repo.unsubscribe(active.id)

    again = subscriber_repo.upsert_pending_signup("rider@example.com")

    assert again.id == active.id
    assert not again.is_verified and not again.is_subscribed


def test_active_recipients_in_signup_order(subscriber_repo):
    a = activate(subscriber_repo, "a@example.com")
    subscriber_repo.upsert_pending_signup("pending@example.com")
    b = activate(subscriber_repo, "b@example.com")
    c = activate(subscriber_repo, "c@example.com")
    subscriber_repo.unsubscribe(b.id)

    recipients = subscriber_repo.list_active_recipients()

    assert [r.email for r in recipients] == ["a@example.com", "c@example.com"]
    assert [r.id for r in recipients] == sorted([a.id, c.id])


def test_concurrent_signups_for_same_email(subscriber_repo, db_path):
    results = []
    errors = []

    def worker() -> None:
        try:
            results.append(subscriber_repo.upsert_pending_signup("race@example.com"))
        except Exception as e:  # noqa: BLE001
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len({r.id for r in results}) == 1

    conn = sqlite3.connect(db_path)
    count = conn.execute("SELECT count(*) FROM users WHERE email = 'race@example.com'").fetchone()[0]
    conn.close()
    assert count == 1


def test_concurrent_verify_succeeds_once(subscriber_repo):
    pending = subscriber_repo.upsert_pending_signup("race@example.com")
    outcomes = []

    def worker() -> None:
        try:
            subscriber_repo.verify(pending.verification_token)
            outcomes.append("ok")
        except SubscriberNotFoundError:
            outcomes.append("not_found")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("not_found") == 7


def test_missing_schema_raises_store_error(tmp_path):
    repo = SQLiteSubscriberRepo(str(tmp_path / "empty.db"))

    with pytest.raises(StoreError) as exc:
        repo.upsert_pending_signup("rider@example.com")

    assert exc.value.operation == "upsert_pending_signup"
