"""Monitoring configuration for the practice engine."""
from prometheus_client import Counter, start_http_server

# Practice metrics
questions_answered = Counter(
    "examiner_questions_answered_total",
    "Total number of answered practice questions",
    ["mode", "result"],
)

sessions_completed = Counter(
    "examiner_sessions_completed_total",
    "Total number of completed practice sessions",
    ["mode"],
)

retry_rounds = Counter(
    "examiner_retry_rounds_total",
    "Total number of retry rounds started for missed pairs",
)

# Input metrics
pairs_generated = Counter(
    "examiner_pairs_generated_total",
    "Total number of word pairs returned by the generator",
)

# Error metrics
persistence_errors = Counter(
    "examiner_persistence_errors_total",
    "Total number of failed database writes",
    ["operation"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
