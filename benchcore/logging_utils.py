import json, logging, sys, time
from typing import Dict, Mapping

from benchcore.config import CONFIG

_RESERVED = frozenset((
    "name", "msg", "args", "exc_info", "exc_text", "stack_info", "created",
    "msecs", "relativeCreated", "levelno", "levelname", "pathname", "filename",
    "module", "lineno", "funcName", "thread", "threadName", "processName",
    "process", "taskName",
))


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # Allow extra fields via record.__dict__ (filtered)
        for k, v in record.__dict__.items():
            if k in _RESERVED:
                continue
            try:
                json.dumps({k: v})
                payload[k] = v
            except (TypeError, ValueError):
                payload[k] = str(v)
        return json.dumps(payload)


def get_logger(name: str = "benchcore") -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(CONFIG["LOG_LEVEL"].upper())
    h = logging.StreamHandler(sys.stderr)
    h.setFormatter(JsonFormatter())
    logger.addHandler(h)
    logger.propagate = False
    return logger


# =============================================================================
# In-process counters for pipeline runs
# =============================================================================

class Counter:
    """Monotonic count, e.g. pipeline runs or anomalies of one kind."""

    def __init__(self):
        self.value = 0

    def inc(self, n: int = 1) -> None:
        if n < 0:
            raise ValueError("counters only go up")
        self.value += n


class Gauge:
    """Last observed value, e.g. comparisons built by the latest run."""

    def __init__(self):
        self.value = 0

    def set(self, v: float) -> None:
        self.value = v


class Metrics:
    def __init__(self):
        self.counters: Dict[str, Counter] = {}
        self.gauges: Dict[str, Gauge] = {}

    def counter(self, name: str) -> Counter:
        return self.counters.setdefault(name, Counter())

    def gauge(self, name: str) -> Gauge:
        return self.gauges.setdefault(name, Gauge())

    def record_run(self, comparison_count: int, anomaly_counts: Mapping[str, int]) -> None:
        """Count one pipeline run and its non-zero anomalies per kind."""
        self.counter("pipeline_runs").inc()
        self.gauge("comparisons").set(comparison_count)
        for kind, count in anomaly_counts.items():
            if count:
                self.counter(f"anomalies_{kind}").inc(count)

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        return {
            "counters": {k: c.value for k, c in self.counters.items()},
            "gauges": {k: g.value for k, g in self.gauges.items()},
        }


METRICS = Metrics()
