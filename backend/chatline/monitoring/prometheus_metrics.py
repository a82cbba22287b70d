"""
Prometheus metrics for the chat backend.

Service timings come from the @measure_operation decorator; the realtime hub
reports its connection gauge and delivery counters here.
"""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "chatline_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "chatline_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "chatline_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

realtime_connections = Gauge(
    "chatline_realtime_connections",
    "Number of open realtime sessions",
    registry=REGISTRY,
)

realtime_events_total = Counter(
    "chatline_realtime_events_total",
    "Realtime events delivered to sessions",
    ["event_type", "status"],  # delivered | failed
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'ConversationService')
            operation: Operation name (e.g., 'send_message')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def set_realtime_connections(count: int) -> None:
        realtime_connections.set(count)

    @staticmethod
    def record_realtime_delivery(event_type: str, delivered: int, failed: int) -> None:
        if delivered:
            realtime_events_total.labels(event_type=event_type, status="delivered").inc(delivered)
        if failed:
            realtime_events_total.labels(event_type=event_type, status="failed").inc(failed)

    @staticmethod
    def get_metrics() -> bytes:
        """Generate Prometheus metrics in exposition format."""
        return generate_latest(REGISTRY)

    @staticmethod
    def get_content_type() -> str:
        return CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
