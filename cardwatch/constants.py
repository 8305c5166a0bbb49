"""
Shared constants across parsing, windowing and scoring
"""

# Wire format: transactionId,accountNo,merchant,category,amount,timestamp
FIELD_DELIMITER = ","
MIN_FIELD_COUNT = 6

# Windowing
DEFAULT_WINDOW_SECONDS = 20.0

# Context lookups
DEFAULT_HISTORY_LIMIT = 10

# Enrichment
DEFAULT_SCORING_WORKERS = 4
DEFAULT_MAX_CONCURRENCY = 64

# Source reconnect backoff
DEFAULT_RECONNECT_DELAY_SEC = 5.0

# Longest accepted feed line; longer lines are skipped
MAX_LINE_BYTES = 64 * 1024

# Kafka
DEFAULT_KAFKA_TOPIC = "card-transactions"
DEFAULT_KAFKA_GROUP_ID = "cardwatch-streaming"

# Alert labels
ALERT_LOW = "LOW"
ALERT_MEDIUM = "MEDIUM"
ALERT_HIGH = "HIGH"

ALERT_LABELS = [
    ALERT_LOW,
    ALERT_MEDIUM,
    ALERT_HIGH,
]

# Possibility thresholds (0-100 scale)
MEDIUM_ALERT_THRESHOLD = 40
HIGH_ALERT_THRESHOLD = 70

# Possibility weights
UNKNOWN_ACCOUNT_RISK = 40
INACTIVE_ACCOUNT_RISK = 60
OVER_LIMIT_RISK = 50
NEAR_LIMIT_RISK = 20
NO_HISTORY_RISK = 10
SPIKE_RISK = 30
ELEVATED_RISK = 15
VELOCITY_RISK = 20
NEW_CATEGORY_RISK = 10
NEAR_THRESHOLD_RISK = 10

# Rule thresholds
NEAR_LIMIT_RATIO = 0.8
SPIKE_MULTIPLIER = 5.0
ELEVATED_MULTIPLIER = 3.0
VELOCITY_LIMIT = 5
MIN_HISTORY_FOR_CATEGORY = 3

# Structuring band just below the $10K reporting threshold
NEAR_THRESHOLD_MIN = 9500
NEAR_THRESHOLD_MAX = 10000

ACTIVE_ACCOUNT_STATUS = "active"
