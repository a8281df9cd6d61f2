"""
Metrics Collection for the Job Worker

Collects in-memory metrics for:
- Polling (activation calls, activation errors, skipped ticks)
- Jobs per type (activated, completed, failed, acknowledgement errors)
- Handler durations (average, p95) per job type
"""

import statistics
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from typing import Any, Dict, List, Optional


# =============================================================================
# Metric Data Classes
# =============================================================================

@dataclass
class PollMetrics:
    """Metrics for activation polling."""
    polls: int = 0
    errors: int = 0
    skipped: int = 0

    # Last successful activation call per job type
    last_poll: Dict[str, datetime] = field(default_factory=dict)


@dataclass
class JobMetrics:
    """Metrics for job execution."""
    activated: int = 0
    completed: int = 0
    failed: int = 0
    ack_errors: int = 0

    by_type: Dict[str, Dict[str, int]] = field(
        default_factory=lambda: defaultdict(
            lambda: {"activated": 0, "completed": 0, "failed": 0, "ack_errors": 0}
        )
    )


@dataclass
class TimingMetrics:
    """Handler duration metrics."""
    # Raw samples (keep last N for percentile calculations)
    samples: List[float] = field(default_factory=list)
    max_samples: int = 1000

    by_type: Dict[str, List[float]] = field(default_factory=lambda: defaultdict(list))

    def add_sample(self, duration_ms: float, job_type: Optional[str] = None):
        """Add a timing sample."""
        self.samples.append(duration_ms)
        if len(self.samples) > self.max_samples:
            self.samples = self.samples[-self.max_samples:]

        if job_type:
            self.by_type[job_type].append(duration_ms)
            if len(self.by_type[job_type]) > self.max_samples:
                self.by_type[job_type] = self.by_type[job_type][-self.max_samples:]

    def _samples_for(self, job_type: Optional[str]) -> List[float]:
        return self.by_type.get(job_type, []) if job_type else self.samples

    def get_average(self, job_type: Optional[str] = None) -> float:
        """Get average duration."""
        samples = self._samples_for(job_type)
        return statistics.mean(samples) if samples else 0.0

    def get_p95(self, job_type: Optional[str] = None) -> float:
        """Get 95th percentile duration."""
        samples = self._samples_for(job_type)
        if not samples:
            return 0.0
        sorted_samples = sorted(samples)
        idx = int(len(sorted_samples) * 0.95)
        return sorted_samples[min(idx, len(sorted_samples) - 1)]


# =============================================================================
# Metrics Collector (Singleton)
# =============================================================================

class MetricsCollector:
    """
    Thread-safe metrics collector for job polling and execution.

    Usage:
        metrics = MetricsCollector.instance()
        metrics.record_poll("search-employee", activated=3)
        metrics.record_job_completed("search-employee", duration_ms=12)
    """

    _instance: Optional["MetricsCollector"] = None
    _lock = Lock()

    def __init__(self):
        self.polls = PollMetrics()
        self.jobs = JobMetrics()
        self.timings = TimingMetrics()
        self._lock = Lock()

    @classmethod
    def instance(cls) -> "MetricsCollector":
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def reset(self):
        """Clear all metrics."""
        with self._lock:
            self.polls = PollMetrics()
            self.jobs = JobMetrics()
            self.timings = TimingMetrics()

    # =========================================================================
    # Poll Metrics
    # =========================================================================

    def record_poll(self, job_type: str, activated: int = 0):
        """Record a successful activation call."""
        with self._lock:
            self.polls.polls += 1
            self.polls.last_poll[job_type] = datetime.utcnow()
            self.jobs.activated += activated
            self.jobs.by_type[job_type]["activated"] += activated

    def record_poll_error(self, job_type: str):
        """Record a failed activation call."""
        with self._lock:
            self.polls.errors += 1

    def record_poll_skipped(self, job_type: str):
        """Record a tick skipped because the engine was unreachable."""
        with self._lock:
            self.polls.skipped += 1

    # =========================================================================
    # Job Metrics
    # =========================================================================

    def record_job_completed(self, job_type: str, duration_ms: Optional[float] = None):
        """Record a completed job."""
        with self._lock:
            self.jobs.completed += 1
            self.jobs.by_type[job_type]["completed"] += 1
            if duration_ms is not None:
                self.timings.add_sample(duration_ms, job_type)

    def record_job_failed(self, job_type: str, duration_ms: Optional[float] = None):
        """Record a failed job."""
        with self._lock:
            self.jobs.failed += 1
            self.jobs.by_type[job_type]["failed"] += 1
            if duration_ms is not None:
                self.timings.add_sample(duration_ms, job_type)

    def record_ack_error(self, job_type: str):
        """Record an error while acknowledging a job."""
        with self._lock:
            self.jobs.ack_errors += 1
            self.jobs.by_type[job_type]["ack_errors"] += 1

    def get_timing_stats(self, job_type: Optional[str] = None) -> Dict[str, float]:
        """Get timing statistics for a job type (or overall)."""
        with self._lock:
            return {
                "average_ms": self.timings.get_average(job_type),
                "p95_ms": self.timings.get_p95(job_type),
                "sample_count": len(self.timings._samples_for(job_type)),
            }

    # =========================================================================
    # Summary
    # =========================================================================

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all metrics."""
        with self._lock:
            return {
                "polls": {
                    "total": self.polls.polls,
                    "errors": self.polls.errors,
                    "skipped": self.polls.skipped,
                    "last_poll": {k: v.isoformat() for k, v in self.polls.last_poll.items()},
                },
                "jobs": {
                    "activated": self.jobs.activated,
                    "completed": self.jobs.completed,
                    "failed": self.jobs.failed,
                    "ack_errors": self.jobs.ack_errors,
                    "by_type": {k: dict(v) for k, v in self.jobs.by_type.items()},
                },
                "timings": {
                    "overall": {
                        "average_ms": self.timings.get_average(),
                        "p95_ms": self.timings.get_p95(),
                    },
                    "by_type": {
                        job_type: {
                            "average_ms": self.timings.get_average(job_type),
                            "p95_ms": self.timings.get_p95(job_type),
                        }
                        for job_type in self.timings.by_type.keys()
                    },
                },
            }


# =============================================================================
# Module-level convenience functions
# =============================================================================

def get_metrics() -> MetricsCollector:
    """Get the global metrics collector."""
    return MetricsCollector.instance()


def record_poll(job_type: str, activated: int = 0):
    get_metrics().record_poll(job_type, activated)


def record_job_completed(job_type: str, duration_ms: Optional[float] = None):
    get_metrics().record_job_completed(job_type, duration_ms)


def record_job_failed(job_type: str, duration_ms: Optional[float] = None):
    get_metrics().record_job_failed(job_type, duration_ms)
