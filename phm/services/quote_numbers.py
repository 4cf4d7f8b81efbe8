# phm/services/quote_numbers.py
from __future__ import annotations

import re
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from phm.core.clock import utcnow
from phm.core.errors import ConflictError
from phm.core.logging_config import logger
from phm.models.quote import Quote, QuoteSequence

PREFIX = "QUO"
MAX_ATTEMPTS = 20

_NUMBER_RE = re.compile(rf"^{PREFIX}-(\d{{4}})-(\d+)$")


def format_quote_number(year: int, seq: int) -> str:
    return f"{PREFIX}-{year}-{seq:03d}"


def parse_quote_number(number: str) -> Optional[Tuple[int, int]]:
    """'QUO-2026-007' -> (2026, 7); None for anything else."""
    m = _NUMBER_RE.match(number or "")
    if not m:
        return None
    return int(m.group(1)), int(m.group(2))


def _highest_existing(db: Session, account_id: int, year: int) -> int:
    rows = (
        db.query(Quote.quote_number)
        .filter(
            Quote.account_id == account_id,
            Quote.quote_number.like(f"{PREFIX}-{year}-%"),
        )
        .all()
    )
    highest = 0
    for (number,) in rows:
        parsed = parse_quote_number(number)
        if parsed and parsed[0] == year:
            highest = max(highest, parsed[1])
    return highest


def _ensure_counter(db: Session, account_id: int, year: int) -> None:
    exists = (
        db.query(QuoteSequence.id)
        .filter(QuoteSequence.account_id == account_id, QuoteSequence.year == year)
        .first()
    )
    if exists:
        return

    # first number of the year for this account: continue after any quotes
    # that were numbered before the counter row existed
    seed = _highest_existing(db, account_id, year)
    try:
        with db.begin_nested():
            db.add(QuoteSequence(account_id=account_id, year=year, last_value=seed))
    except IntegrityError:
        # a concurrent request created the row; use theirs
        logger.info("quote_sequence_race", account_id=account_id, year=year)


def next_quote_number(db: Session, account_id: int, now: Optional[datetime] = None) -> str:
    """
    Reserve the next QUO-<year>-<seq> for an account.

    The counter row is advanced with a compare-and-swap UPDATE, so two
    writers can never get the same value; the loser simply re-reads and
    tries again. The reservation is part of the caller's transaction and
    is released if that transaction rolls back.
    """
    year = (now or utcnow()).year
    _ensure_counter(db, account_id, year)

    for _ in range(MAX_ATTEMPTS):
        current = (
            db.query(QuoteSequence.last_value)
            .filter(QuoteSequence.account_id == account_id, QuoteSequence.year == year)
            .scalar()
        )
        result = db.execute(
            update(QuoteSequence)
            .where(
                QuoteSequence.account_id == account_id,
                QuoteSequence.year == year,
                QuoteSequence.last_value == current,
            )
            .values(last_value=current + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            number = format_quote_number(year, current + 1)
            logger.info("quote_number_assigned", account_id=account_id, quote_number=number)
            return number

    raise ConflictError("Could not allocate a quote number, please retry")
