import re
from datetime import datetime, timezone

import pytest

from phm.models.account import Account
from phm.models.customer import Customer
from phm.models.quote import Quote, QuoteSequence
from phm.services.quote_numbers import format_quote_number, next_quote_number, parse_quote_number

NUMBER_RE = re.compile(r"^QUO-\d{4}-\d{3,}$")


@pytest.fixture
def account_id(db):
    account = Account(name="Numbering Ltd", plan="free", is_active=True)
    db.add(account)
    db.commit()
    return account.id


def test_format_and_parse():
    assert format_quote_number(2026, 7) == "QUO-2026-007"
    assert format_quote_number(2026, 1234) == "QUO-2026-1234"
    assert parse_quote_number("QUO-2026-007") == (2026, 7)
    assert parse_quote_number("QUO-26-7") is None
    assert parse_quote_number("") is None


def test_numbers_increase_per_account_and_year(db, account_id):
    now = datetime(2026, 3, 1, tzinfo=timezone.utc)
    first = next_quote_number(db, account_id, now=now)
    second = next_quote_number(db, account_id, now=now)
    db.commit()

    assert first == "QUO-2026-001"
    assert second == "QUO-2026-002"
    assert NUMBER_RE.match(first)

    next_year = next_quote_number(db, account_id, now=datetime(2027, 1, 2, tzinfo=timezone.utc))
    db.commit()
    assert next_year == "QUO-2027-001"


def test_accounts_have_independent_sequences(db, account_id):
    other = Account(name="Other Ltd", plan="free", is_active=True)
    db.add(other)
    db.commit()

    now = datetime(2026, 5, 1, tzinfo=timezone.utc)
    assert next_quote_number(db, account_id, now=now) == "QUO-2026-001"
    assert next_quote_number(db, other.id, now=now) == "QUO-2026-001"
    db.commit()


def test_counter_continues_after_existing_numbers(db, account_id):
    customer = Customer(account_id=account_id, first_name="A", last_name="B", postcode="LS1 1AA", country="UK")
    db.add(customer)
    db.flush()
    for number in ("QUO-2025-041", "QUO-2025-009", "LEGACY-77"):
        db.add(Quote(account_id=account_id, customer_id=customer.id, quote_number=number, title="old"))
    db.commit()

    number = next_quote_number(db, account_id, now=datetime(2025, 12, 31, tzinfo=timezone.utc))
    db.commit()
    assert number == "QUO-2025-042"

    seq = db.query(QuoteSequence).filter_by(account_id=account_id, year=2025).one()
    assert seq.last_value == 42


def test_rolled_back_reservation_is_released(db, account_id):
    now = datetime(2026, 8, 1, tzinfo=timezone.utc)
    next_quote_number(db, account_id, now=now)
    db.commit()

    next_quote_number(db, account_id, now=now)
    db.rollback()

    assert next_quote_number(db, account_id, now=now) == "QUO-2026-002"
    db.commit()
