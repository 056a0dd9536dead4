"""Prometheus metrics for lropoll."""
from prometheus_client import Counter, Histogram, Info


# Poll metrics
poll_attempts_total = Counter(
    'lropoll_poll_attempts_total',
    'Total number of operation status fetches',
    ['method']
)

poll_transport_errors_total = Counter(
    'lropoll_poll_transport_errors_total',
    'Total number of failed operation status fetches',
    ['method']
)

poll_sessions_total = Counter(
    'lropoll_poll_sessions_total',
    'Total number of finished poll sessions',
    ['method', 'outcome']
)

poll_duration_seconds = Histogram(
    'lropoll_poll_duration_seconds',
    'Poll session duration in seconds',
    ['method', 'outcome'],
    buckets=[0.1, 0.5, 1.0, 5.0, 15.0, 30.0, 60.0, 300.0, 900.0, 3600.0]
)

# Cancellation
cancel_requests_total = Counter(
    'lropoll_cancel_requests_total',
    'Total number of operation cancellation requests',
    ['method']
)

# System info
system_info = Info(
    'lropoll_client',
    'lropoll client information'
)


def record_poll_attempt(method: str) -> None:
    """Record one status fetch."""
    poll_attempts_total.labels(method=method).inc()


def record_transport_error(method: str) -> None:
    """Record one failed status fetch."""
    poll_transport_errors_total.labels(method=method).inc()


def record_poll_finished(method: str, outcome: str, duration: float) -> None:
    """Record the end of a poll session."""
    poll_sessions_total.labels(method=method, outcome=outcome).inc()
    poll_duration_seconds.labels(method=method, outcome=outcome).observe(duration)


def record_cancel_request(method: str) -> None:
    """Record an operation cancellation request."""
    cancel_requests_total.labels(method=method).inc()


def init_system_info(version: str) -> None:
    """
    Initialize client information metric.

    Args:
        version: Client version
    """
    system_info.info({
        'version': version,
        'name': 'lropoll'
    })
