"""Observability for cloud-mcp.

Provides:
- Correlation ID generation
- JSON structured logging
- Token redaction for every handler on the cloud-mcp logger
- In-memory metrics collection
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
import json
import logging
import sys
from threading import Lock
import time
from typing import Any
import uuid

from cloud_mcp.config import CloudMcpConfig, ObservabilityConfig

LOGGER_NAME = "cloud-mcp"
REDACTED = "***"

_secrets: set[str] = set()
_secrets_lock = Lock()


def register_secret(secret: str) -> None:
    """Mask ``secret`` in every record that passes a TokenRedactionFilter."""
    if not secret:
        return
    with _secrets_lock:
        _secrets.add(secret)


def redact(text: str) -> str:
    with _secrets_lock:
        secrets = sorted(_secrets, key=len, reverse=True)
    for secret in secrets:
        text = text.replace(secret, REDACTED)
    return text


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracing."""
    return str(uuid.uuid4())[:8]  # Short form for readability


class TokenRedactionFilter(logging.Filter):
    """Replace registered account tokens in the rendered message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        if isinstance(getattr(record, "error", None), str):
            record.error = redact(record.error)
        return True


class JsonLogFormatter(logging.Formatter):
    """JSON structured log formatter with correlation ID support."""

    def __init__(self, include_correlation_id: bool = True):
        super().__init__()
        self.include_correlation_id = include_correlation_id

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if self.include_correlation_id and hasattr(record, "correlation_id"):
            log_data["cid"] = record.correlation_id

        for key in ("tool", "account", "category", "latency_ms", "error"):
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exc"] = redact(self.formatException(record.exc_info))

        return json.dumps(log_data, separators=(",", ":"))


@dataclass
class ToolMetrics:
    """Metrics for a single tool."""

    call_count: int = 0
    error_count: int = 0
    total_latency_ms: float = 0.0
    min_latency_ms: float = float("inf")
    max_latency_ms: float = 0.0

    @property
    def avg_latency_ms(self) -> float:
        if self.call_count == 0:
            return 0.0
        return self.total_latency_ms / self.call_count


class MetricsCollector:
    """In-memory metrics collector.

    Thread-safe collection of:
    - Per-tool call counts, errors, latencies
    - Global request counts
    - Failure counts per error category
    """

    def __init__(self):
        self._lock = Lock()
        self._tools: dict[str, ToolMetrics] = defaultdict(ToolMetrics)
        self._categories: dict[str, int] = defaultdict(int)
        self._total_requests: int = 0
        self._total_errors: int = 0
        self._start_time: float = time.time()

    def record_call(self, tool: str, latency_ms: float, category: str = "ok") -> None:
        """Record a tool call; ``category`` is "ok" or an error category."""
        success = category == "ok"
        with self._lock:
            self._total_requests += 1
            if not success:
                self._total_errors += 1
                self._categories[category] += 1

            metrics = self._tools[tool]
            metrics.call_count += 1
            if not success:
                metrics.error_count += 1
            metrics.total_latency_ms += latency_ms
            metrics.min_latency_ms = min(metrics.min_latency_ms, latency_ms)
            metrics.max_latency_ms = max(metrics.max_latency_ms, latency_ms)

    def get_stats(self) -> dict[str, Any]:
        """Get current metrics snapshot."""
        with self._lock:
            uptime_s = time.time() - self._start_time
            tool_stats = {}
            for name, m in self._tools.items():
                tool_stats[name] = {
                    "calls": m.call_count,
                    "errors": m.error_count,
                    "avg_ms": round(m.avg_latency_ms, 2),
                    "min_ms": round(m.min_latency_ms, 2) if m.min_latency_ms != float("inf") else 0,
                    "max_ms": round(m.max_latency_ms, 2),
                }

            return {
                "uptime_s": round(uptime_s, 1),
                "total_requests": self._total_requests,
                "total_errors": self._total_errors,
                "error_rate": round(self._total_errors / max(1, self._total_requests), 4),
                "errors_by_category": dict(self._categories),
                "tools": tool_stats,
            }

    def reset(self) -> None:
        """Reset all metrics (for testing)."""
        with self._lock:
            self._tools.clear()
            self._categories.clear()
            self._total_requests = 0
            self._total_errors = 0
            self._start_time = time.time()


class ObservabilityContext:
    """Unified observability context for the server.

    Usage:
        obs = ObservabilityContext(config.observability)

        # In the dispatcher:
        cid = obs.correlation_id()
        start = time.monotonic()
        # ... do work ...
        obs.record("linode_instances_list", latency_ms=..., category="ok")
    """

    def __init__(self, config: ObservabilityConfig | None = None):
        self.config = config or ObservabilityConfig()
        self.enabled = self.config.enabled

        # Metrics collector (always available, even if disabled)
        self.metrics = MetricsCollector()

    def correlation_id(self) -> str:
        """Generate a new correlation ID."""
        return generate_correlation_id()

    def record(self, tool: str, latency_ms: float, category: str = "ok") -> None:
        """Record a tool call to metrics."""
        if not self.enabled:
            return
        self.metrics.record_call(tool=tool, latency_ms=latency_ms, category=category)

    def get_stats(self) -> dict[str, Any]:
        """Get current metrics snapshot."""
        return self.metrics.get_stats()


def setup_logging(config: CloudMcpConfig, logger_name: str = LOGGER_NAME) -> logging.Logger:
    """Configure the cloud-mcp logger tree.

    Logs go to stderr; stdout belongs to the stdio transport.

    Args:
        config: Root configuration (log level from [server], format from [observability])
        logger_name: Name of logger to configure

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Clear existing handlers
    logger.handlers.clear()
    logger.propagate = False

    level = getattr(logging, config.server.log_level.upper(), logging.INFO)
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(TokenRedactionFilter())

    if config.observability.log_format == "json":
        handler.setFormatter(
            JsonLogFormatter(include_correlation_id=config.observability.include_correlation_id)
        )
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    logger.addHandler(handler)

    return logger
