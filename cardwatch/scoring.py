"""
Fraud scoring
Pluggable contract: score(account | None, transaction, recent_history) -> alert label

The default RuleBasedScorer adds up a fraud possibility (0-100) from a few
account and history features and maps it to an alert label.
"""
import importlib
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Sequence

from cardwatch.constants import (
    ACTIVE_ACCOUNT_STATUS,
    ALERT_HIGH,
    ALERT_LOW,
    ALERT_MEDIUM,
    ELEVATED_MULTIPLIER,
    ELEVATED_RISK,
    HIGH_ALERT_THRESHOLD,
    INACTIVE_ACCOUNT_RISK,
    MEDIUM_ALERT_THRESHOLD,
    MIN_HISTORY_FOR_CATEGORY,
    NEAR_LIMIT_RATIO,
    NEAR_LIMIT_RISK,
    NEAR_THRESHOLD_MAX,
    NEAR_THRESHOLD_MIN,
    NEAR_THRESHOLD_RISK,
    NEW_CATEGORY_RISK,
    NO_HISTORY_RISK,
    OVER_LIMIT_RISK,
    SPIKE_MULTIPLIER,
    SPIKE_RISK,
    UNKNOWN_ACCOUNT_RISK,
    VELOCITY_LIMIT,
    VELOCITY_RISK,
)
from cardwatch.entities import Account, Transaction
from cardwatch.exceptions import ConfigurationError

Scorer = Callable[[Optional[Account], Transaction, Sequence[Transaction]], str]


class BaseFraudScorer(ABC):
    """Abstract base for fraud scorers"""

    @abstractmethod
    def score(self, account: Optional[Account], transaction: Transaction,
              recent_history: Sequence[Transaction]) -> str:
        pass

    def __call__(self, account: Optional[Account], transaction: Transaction,
                 recent_history: Sequence[Transaction]) -> str:
        return self.score(account, transaction, recent_history)


class RuleBasedScorer(BaseFraudScorer):
    """
    Heuristic scorer over account profile and recent history
    Pure: the same inputs always give the same label
    """

    @staticmethod
    def extract_features(account: Optional[Account], transaction: Transaction,
                         recent_history: Sequence[Transaction]) -> Dict:
        """
        Extract scoring features for one transaction

        Args:
            account: Account profile, None if unknown
            transaction: Transaction being scored
            recent_history: Prior transactions of the account, newest first

        Returns:
            Dict of computed features
        """
        amounts = [t.amount for t in recent_history]
        avg_amount = sum(amounts) / len(amounts) if amounts else 0.0

        credit_limit = account.credit_limit if account else None
        limit_ratio = (
            transaction.amount / credit_limit
            if credit_limit and credit_limit > 0
            else 0.0
        )

        day = transaction.transaction_date[:10]
        same_day_count = sum(1 for t in recent_history if t.transaction_date[:10] == day)

        known_categories = {t.category for t in recent_history}

        return {
            "has_account": account is not None,
            "is_active": account is None or account.status == ACTIVE_ACCOUNT_STATUS,
            "limit_ratio": limit_ratio,
            "history_size": len(amounts),
            "avg_amount": avg_amount,
            "amount_multiple": transaction.amount / avg_amount if avg_amount > 0 else 0.0,
            "same_day_count": same_day_count,
            "is_new_category": (
                len(amounts) >= MIN_HISTORY_FOR_CATEGORY
                and transaction.category not in known_categories
            ),
            "is_near_threshold": NEAR_THRESHOLD_MIN <= transaction.amount < NEAR_THRESHOLD_MAX,
        }

    @staticmethod
    def calc_possibility(features: Dict) -> int:
        """Fraud possibility on a 0-100 scale"""
        possibility = 0

        if not features["has_account"]:
            possibility += UNKNOWN_ACCOUNT_RISK
        elif not features["is_active"]:
            possibility += INACTIVE_ACCOUNT_RISK

        if features["limit_ratio"] > 1.0:
            possibility += OVER_LIMIT_RISK
        elif features["limit_ratio"] >= NEAR_LIMIT_RATIO:
            possibility += NEAR_LIMIT_RISK

        if features["history_size"] == 0:
            possibility += NO_HISTORY_RISK
        elif features["amount_multiple"] >= SPIKE_MULTIPLIER:
            possibility += SPIKE_RISK
        elif features["amount_multiple"] >= ELEVATED_MULTIPLIER:
            possibility += ELEVATED_RISK

        if features["same_day_count"] >= VELOCITY_LIMIT:
            possibility += VELOCITY_RISK
        if features["is_new_category"]:
            possibility += NEW_CATEGORY_RISK
        if features["is_near_threshold"]:
            possibility += NEAR_THRESHOLD_RISK

        return min(possibility, 100)

    @staticmethod
    def label_for(possibility: int) -> str:
        if possibility >= HIGH_ALERT_THRESHOLD:
            return ALERT_HIGH
        if possibility >= MEDIUM_ALERT_THRESHOLD:
            return ALERT_MEDIUM
        return ALERT_LOW

    def score(self, account: Optional[Account], transaction: Transaction,
              recent_history: Sequence[Transaction]) -> str:
        features = self.extract_features(account, transaction, recent_history)
        return self.label_for(self.calc_possibility(features))


def load_scorer(path: Optional[str]) -> Scorer:
    """
    Resolve a scorer from "package.module:attribute"
    Classes are instantiated; any other callable is used as is.
    None gives the default RuleBasedScorer.
    """
    if not path:
        return RuleBasedScorer()

    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise ConfigurationError(f"Scorer must look like 'module:attribute', got {path!r}")

    try:
        module = importlib.import_module(module_name)
        target = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot load scorer {path!r}: {e}") from e

    scorer = target() if isinstance(target, type) else target
    if not callable(scorer):
        raise ConfigurationError(f"Scorer {path!r} is not callable")
    return scorer
