"""Prometheus Pushgateway publisher for the aggregated counters."""

import logging
from typing import Iterable

from prometheus_client import CollectorRegistry, Gauge, push_to_gateway

from smblogparser.errors import MetricsPushError
from smblogparser.models import UserMetrics

logger = logging.getLogger(__name__)

LABELS = ["user", "device"]


class MetricsPublisher:
    def __init__(self, pushgateway_url: str, job_name: str,
                 registry: CollectorRegistry | None = None):
        self._pushgateway_url = pushgateway_url
        self._job_name = job_name
        self.registry = registry or CollectorRegistry()

        self.create_ops = Gauge(
            "smb_create_operations_total",
            "Total number of SMB create operations per user",
            LABELS, registry=self.registry,
        )
        self.open_ops = Gauge(
            "smb_open_operations_total",
            "Total number of SMB open operations per user",
            LABELS, registry=self.registry,
        )
        self.modify_ops = Gauge(
            "smb_modify_operations_total",
            "Total number of SMB modify operations per user",
            LABELS, registry=self.registry,
        )
        self.delete_ops = Gauge(
            "smb_delete_operations_total",
            "Total number of SMB delete operations per user",
            LABELS, registry=self.registry,
        )

    def publish(self, metrics: Iterable[UserMetrics]) -> int:
        """Set all four gauges for every (user, device). Returns the key count."""
        count = 0
        for m in metrics:
            self.create_ops.labels(m.user, m.device).set(m.create)
            self.open_ops.labels(m.user, m.device).set(m.open)
            self.modify_ops.labels(m.user, m.device).set(m.modify)
            self.delete_ops.labels(m.user, m.device).set(m.delete)
            logger.info(
                "User: %s, Device: %s - Create: %d, Open: %d, Modify: %d, Delete: %d",
                m.user, m.device, m.create, m.open, m.modify, m.delete,
            )
            count += 1
        return count

    def push(self) -> None:
        try:
            push_to_gateway(self._pushgateway_url, job=self._job_name, registry=self.registry)
        except (OSError, ValueError) as e:
            raise MetricsPushError(f"failed to push metrics: {e}") from e
        logger.info("Pushed metrics to Pushgateway %s (job=%s)",
                    self._pushgateway_url, self._job_name)
