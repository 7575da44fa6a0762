"""
Prometheus exporter writer for MegaRAID probe results.
Publishes the media type found for each device as an info-style gauge.
"""

import logging
import threading
import time
from typing import Dict, Any, List, Optional
from prometheus_client import Gauge, CollectorRegistry, start_http_server, generate_latest

from .base import Writer
from ..schema.models import ClassificationResult

# Initialize logger
LOG = logging.getLogger(__name__)

STATUSES = (
    ClassificationResult.MATCHED,
    ClassificationResult.NO_MATCH,
    ClassificationResult.SKIPPED,
    ClassificationResult.ERROR,
)


class PrometheusWriter(Writer):
    """
    Prometheus writer exposing one sample per classified device.

    Metrics:
    - megaraid_probe_drive_type_info{device, drive_type}: 1 for each matched device
    - megaraid_probe_classification_status{device, status}: 1 for the device's current status
    - megaraid_probe_last_sweep_timestamp_seconds: completion time of the last sweep
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize Prometheus Writer.

        Args:
            config: Optional configuration dictionary
        """
        config = config or {}

        self.port = config.get('prometheus_port', 8000)
        self.serve = config.get('serve', True)

        # Create separate registry for this writer
        self.prometheus_registry = CollectorRegistry()

        self.drive_type_info = Gauge(
            'megaraid_probe_drive_type_info',
            'Media type of a block device behind a MegaRAID controller',
            ['device', 'drive_type'],
            registry=self.prometheus_registry,
        )
        self.classification_status = Gauge(
            'megaraid_probe_classification_status',
            'Outcome of the last classification of a block device',
            ['device', 'status'],
            registry=self.prometheus_registry,
        )
        self.last_sweep = Gauge(
            'megaraid_probe_last_sweep_timestamp_seconds',
            'Unix time the last sweep completed',
            registry=self.prometheus_registry,
        )

        # Server management
        self.server_lock = threading.Lock()
        self.server_started = False

        LOG.info("PrometheusWriter initialized")

    def _sanitize_label_value(self, value: Any) -> str:
        """Sanitize label values to avoid Prometheus metric issues."""
        if value is None:
            return 'unknown'
        value_str = str(value).strip()
        return value_str or 'unknown'

    def _start_prometheus_server(self):
        """Start the Prometheus HTTP server if not already started."""
        with self.server_lock:
            if not self.server_started:
                try:
                    start_http_server(self.port, registry=self.prometheus_registry)
                    self.server_started = True
                    LOG.info(f"Prometheus metrics server started on port {self.port}")
                except OSError as e:
                    LOG.error(f"Failed to start Prometheus server on port {self.port}: {e}")
                    raise

    def write(self, results: List[ClassificationResult], sweep_iteration: int = 1) -> bool:
        """
        Replace the exported samples with this sweep's results.

        Returns:
            bool: True if successful, False otherwise
        """
        try:
            if self.serve and not self.server_started:
                self._start_prometheus_server()

            # Devices can disappear between sweeps, start from a clean slate
            self.drive_type_info.clear()
            self.classification_status.clear()

            for result in results:
                device = self._sanitize_label_value(result.dev_path)
                if result.status == ClassificationResult.MATCHED:
                    self.drive_type_info.labels(
                        device=device,
                        drive_type=self._sanitize_label_value(result.drive_type),
                    ).set(1)
                for status in STATUSES:
                    self.classification_status.labels(device=device, status=status).set(
                        1 if result.status == status else 0)

            self.last_sweep.set(time.time())
            LOG.info(f"Exported {len(results)} classification results (sweep {sweep_iteration})")
            return True

        except OSError as e:
            LOG.error(f"Error writing to Prometheus: {e}")
            return False

    def render(self) -> bytes:
        """Return the current exposition text, as served on /metrics."""
        return generate_latest(self.prometheus_registry)
