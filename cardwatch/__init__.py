"""
CardWatch Streaming
Windowed micro-batch fraud alerting for credit card transaction feeds
"""

from .entities import Transaction, Account, BatchContext
from .parser import parse_line, parse_lines
from .window import WindowAccumulator
from .context_cache import BatchContextCache
from .enrichment import EnrichmentEngine, merge_by_identifier
from .commit import BatchCommitter
from .pipeline import StreamingPipeline, BatchResult, PipelineStats
from .scoring import BaseFraudScorer, RuleBasedScorer, load_scorer
from .constants import ALERT_LABELS

__all__ = [
    "Transaction",
    "Account",
    "BatchContext",
    "parse_line",
    "parse_lines",
    "WindowAccumulator",
    "BatchContextCache",
    "EnrichmentEngine",
    "merge_by_identifier",
    "BatchCommitter",
    "StreamingPipeline",
    "BatchResult",
    "PipelineStats",
    "BaseFraudScorer",
    "RuleBasedScorer",
    "load_scorer",
    "ALERT_LABELS",
]
