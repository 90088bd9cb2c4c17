from datetime import datetime, timedelta

import pytest

from meetbook.core.models import EmailVerification
from meetbook.services.verification import CodeStatus, VerificationStore, generate_code


class Clock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return Clock(datetime(2030, 1, 7, 9, 0, 0))


@pytest.fixture
def timed_store(test_db, clock):
    return VerificationStore(test_db, clock=clock)


def test_generate_code_is_six_digits():
    for _ in range(200):
        code = generate_code()
        assert len(code) == 6
        assert code.isdigit()
        assert 100000 <= int(code) <= 999999


def test_request_code_stores_lowercased_email(timed_store, test_db, clock):
    code = timed_store.request_code("  Anna@Example.COM ")

    record = test_db.query(EmailVerification).one()
    assert record.email == "anna@example.com"
    assert record.code == code
    assert record.verified is False
    assert record.expires_at == clock.now + timedelta(minutes=10)


def test_request_code_overwrites_pending_code(timed_store, test_db):
    timed_store.request_code("anna@example.com")
    second = timed_store.request_code("anna@example.com")

    records = test_db.query(EmailVerification).all()
    assert len(records) == 1
    assert records[0].code == second


def test_request_code_resets_verified_state(timed_store, test_db):
    code = timed_store.request_code("anna@example.com")
    assert timed_store.check_code("anna@example.com", code) is CodeStatus.VERIFIED

    timed_store.request_code("anna@example.com")
    assert timed_store.consume("anna@example.com") is False


def test_check_code_verifies_and_extends_window(timed_store, test_db, clock):
    code = timed_store.request_code("anna@example.com")
    clock.advance(minutes=5)

    assert timed_store.check_code("ANNA@example.com", code) is CodeStatus.VERIFIED
    record = test_db.query(EmailVerification).one()
    assert record.verified is True
    assert record.expires_at == clock.now + timedelta(minutes=30)


def test_wrong_code_is_invalid_and_can_be_retried(timed_store):
    code = timed_store.request_code("anna@example.com")
    wrong = "000000" if code != "000000" else "111111"

    assert timed_store.check_code("anna@example.com", wrong) is CodeStatus.INVALID
    assert timed_store.check_code("anna@example.com", wrong) is CodeStatus.INVALID
    assert timed_store.check_code("anna@example.com", code) is CodeStatus.VERIFIED


def test_check_code_without_request_is_missing(timed_store):
    assert timed_store.check_code("nobody@example.com", "123456") is CodeStatus.MISSING


def test_code_valid_just_before_expiry(timed_store, clock):
    code = timed_store.request_code("anna@example.com")
    clock.advance(minutes=9, seconds=59)
    assert timed_store.check_code("anna@example.com", code) is CodeStatus.VERIFIED


def test_code_expired_just_after_expiry(timed_store, test_db, clock):
    code = timed_store.request_code("anna@example.com")
    clock.advance(minutes=10, seconds=1)

    assert timed_store.check_code("anna@example.com", code) is CodeStatus.EXPIRED
    assert test_db.query(EmailVerification).count() == 0
    assert timed_store.check_code("anna@example.com", code) is CodeStatus.MISSING


def test_consume_is_single_use(timed_store):
    code = timed_store.request_code("anna@example.com")
    timed_store.check_code("anna@example.com", code)

    assert timed_store.consume("Anna@Example.com") is True
    assert timed_store.consume("anna@example.com") is False


def test_consume_requires_verification(timed_store):
    timed_store.request_code("anna@example.com")
    assert timed_store.consume("anna@example.com") is False
    assert timed_store.consume("unknown@example.com") is False


def test_verified_state_expires_after_thirty_minutes(timed_store, clock):
    code = timed_store.request_code("anna@example.com")
    timed_store.check_code("anna@example.com", code)

    clock.advance(minutes=30, seconds=1)
    assert timed_store.consume("anna@example.com") is False


def test_consume_without_commit_is_undone_by_rollback(timed_store, test_db):
    code = timed_store.request_code("anna@example.com")
    timed_store.check_code("anna@example.com", code)

    assert timed_store.consume("anna@example.com", commit=False) is True
    test_db.rollback()

    assert timed_store.consume("anna@example.com") is True


def test_purge_expired(timed_store, test_db, clock):
    timed_store.request_code("old@example.com")
    clock.advance(minutes=11)
    timed_store.request_code("new@example.com")

    emails = [r.email for r in test_db.query(EmailVerification).all()]
    assert emails == ["new@example.com"]
