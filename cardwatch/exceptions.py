"""
Exception hierarchy for the streaming job
"""
from typing import Optional


class CardwatchError(Exception):
    """Base for all cardwatch errors"""


class ConfigurationError(CardwatchError):
    """Invalid or missing startup configuration"""


class BatchProcessingError(CardwatchError):
    """
    A batch could not be enriched or committed
    The whole batch is failed; nothing is retried at this layer
    """

    def __init__(self, message: str, batch_size: int = 0, account_no: Optional[str] = None):
        super().__init__(message)
        self.batch_size = batch_size
        self.account_no = account_no


class BatchConsistencyError(BatchProcessingError):
    """An identifier of the ingested batch has no enriched counterpart"""

    def __init__(self, transaction_id: int, batch_size: int = 0):
        super().__init__(
            f"Transaction {transaction_id} missing from enrichment results",
            batch_size=batch_size
        )
        self.transaction_id = transaction_id


class ContextCacheClosedError(CardwatchError):
    """A batch context cache was used after its batch ended"""
