"""
Transactions and the append-only store mining runs against.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import pandas as pd
from sklearn.preprocessing import MultiLabelBinarizer

from rule_discovery.errors import InvalidTransactionError


@dataclass(frozen=True)
class Transaction:
    """
    A shopping cart, an event, a session step.

    Items are de-duplicated on construction (first occurrence kept).
    actor_id is the customer/session key used to group events into sequences.
    """
    id: str
    items: Tuple[str, ...]
    timestamp: datetime
    actor_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id:
            raise InvalidTransactionError(f"Transaction id must be a non-empty string, got {self.id!r}")
        if isinstance(self.items, str):
            raise InvalidTransactionError(
                f"Transaction {self.id}: items must be a collection of strings, not a string")
        items = tuple(dict.fromkeys(self.items))
        for item in items:
            if not isinstance(item, str) or not item:
                raise InvalidTransactionError(
                    f"Transaction {self.id}: items must be non-empty strings, got {item!r}")
        if not isinstance(self.timestamp, datetime):
            raise InvalidTransactionError(
                f"Transaction {self.id}: timestamp must be a datetime, got {self.timestamp!r}")
        if self.actor_id is not None and not isinstance(self.actor_id, str):
            raise InvalidTransactionError(
                f"Transaction {self.id}: actor_id must be a string, got {self.actor_id!r}")
        object.__setattr__(self, 'items', items)

    def contains(self, item: str) -> bool:
        return item in self.items

    def contains_all(self, items: Iterable[str]) -> bool:
        return all(item in self.items for item in items)


def is_timezone_aware(timestamp: datetime) -> bool:
    return timestamp.tzinfo is not None and timestamp.utcoffset() is not None


def check_timestamp_convention(
    transactions: Iterable[Transaction],
    aware: Optional[bool] = None
) -> Optional[bool]:
    """
    Require every timestamp to be naive, or every one timezone-aware, so
    events can be ordered and subtracted.

    Args:
        transactions: Transactions to check
        aware: Convention already in force (None = take it from the first transaction)

    Returns:
        The convention in force afterwards (None when nothing was checked)

    Raises:
        InvalidTransactionError: On the first transaction breaking the convention
    """
    for tx in transactions:
        tx_aware = is_timezone_aware(tx.timestamp)
        if aware is None:
            aware = tx_aware
        elif tx_aware != aware:
            expected = 'timezone-aware' if aware else 'naive'
            raise InvalidTransactionError(
                f"Transaction {tx.id}: timestamp {tx.timestamp.isoformat()} must be {expected} "
                f"like the rest of the log")
    return aware


class TransactionStore:
    """
    Append-only transaction log.

    Transactions are never modified or removed once appended. Appends must not
    interleave with a running mining call on the same store; mining works on
    `snapshot()` taken at the start of the call.

    The first transaction fixes whether timestamps are naive or
    timezone-aware; later appends must follow it.
    """

    def __init__(self, transactions: Iterable[Transaction] = None):
        self._transactions: List[Transaction] = []
        self._aware: Optional[bool] = None
        if transactions is not None:
            self.add_transactions(transactions)

    def add_transaction(self, transaction: Transaction) -> None:
        if not isinstance(transaction, Transaction):
            raise InvalidTransactionError(
                f"Expected a Transaction, got {type(transaction).__name__}")
        self._aware = check_timestamp_convention([transaction], self._aware)
        self._transactions.append(transaction)

    def add_transactions(self, transactions: Iterable[Transaction]) -> int:
        """
        Append every transaction from an iterable (list, generator, adapter stream).

        The batch is validated before anything is appended, so a bad record
        leaves the store unchanged.

        Returns:
            Number of transactions appended
        """
        batch = list(transactions)
        for transaction in batch:
            if not isinstance(transaction, Transaction):
                raise InvalidTransactionError(
                    f"Expected a Transaction, got {type(transaction).__name__}")
        self._aware = check_timestamp_convention(batch, self._aware)
        self._transactions.extend(batch)
        return len(batch)

    def snapshot(self) -> Tuple[Transaction, ...]:
        return tuple(self._transactions)

    def to_frame(self) -> pd.DataFrame:
        """
        One-hot encode the log: one boolean column per item, one row per transaction.
        """
        return encode_transactions(self._transactions)

    def __len__(self):
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(tuple(self._transactions))

    def __repr__(self):
        return f"TransactionStore(transactions={len(self._transactions)})"


def encode_transactions(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """
    Convert transactions to the boolean one-hot format used for support counting.

    Columns are item labels in sorted order; the index holds transaction ids.
    """
    transactions = list(transactions)
    if not transactions:
        return pd.DataFrame(dtype=bool)
    item_lists = [list(tx.items) for tx in transactions]
    if not any(item_lists):
        return pd.DataFrame(index=[tx.id for tx in transactions], dtype=bool)

    mlb = MultiLabelBinarizer()
    encoded = mlb.fit_transform(item_lists)
    df_encoded = pd.DataFrame(encoded.astype(bool), columns=[str(item) for item in mlb.classes_])
    df_encoded.index = [tx.id for tx in transactions]

    return df_encoded
