"""
Record parser for the comma-delimited transaction feed
Malformed lines are rejected by returning None, never raised
"""
import logging
import math
from typing import Iterable, Iterator, Optional

from cardwatch.constants import FIELD_DELIMITER, MIN_FIELD_COUNT
from cardwatch.entities import Transaction

logger = logging.getLogger(__name__)


def parse_line(line: str) -> Optional[Transaction]:
    """
    Parse one raw feed line

    Args:
        line: transactionId,accountNo,merchant,category,amount,timestamp

    Returns:
        Transaction, or None if the line is rejected
    """
    fields = line.rstrip("\r\n").split(FIELD_DELIMITER)
    if len(fields) < MIN_FIELD_COUNT:
        logger.debug(f"Rejected line (fields={len(fields)}): {line!r}")
        return None

    try:
        transaction_id = int(fields[0])
        amount = float(fields[4])
    except ValueError:
        logger.debug(f"Rejected line (bad number): {line!r}")
        return None

    if not math.isfinite(amount):
        logger.debug(f"Rejected line (non-finite amount): {line!r}")
        return None

    return Transaction(
        transaction_id=transaction_id,
        account_no=fields[1],
        merchant=fields[2],
        category=fields[3],
        amount=amount,
        transaction_date=fields[5]
    )


def parse_lines(lines: Iterable[str]) -> Iterator[Transaction]:
    """Yield accepted transactions, skipping rejected lines"""
    for line in lines:
        transaction = parse_line(line)
        if transaction is not None:
            yield transaction
