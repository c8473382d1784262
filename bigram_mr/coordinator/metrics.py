"""
Performance metrics collection for bigram jobs.
"""

import os
import time
import json
import threading
from dataclasses import dataclass, asdict

import psutil

from bigram_mr.common.records import file_sizes


@dataclass
class JobMetrics:
    """Metrics for a single job execution."""

    job_id: str
    start_time: float
    num_map_tasks: int
    num_reduce_tasks: int
    use_combiner: bool
    input_size_bytes: int
    end_time: float = 0.0
    map_phase_start: float = 0.0
    map_phase_end: float = 0.0
    reduce_phase_start: float = 0.0
    reduce_phase_end: float = 0.0
    intermediate_size_bytes: int = 0
    output_size_bytes: int = 0
    records_emitted: int = 0
    records_shuffled: int = 0
    output_records: int = 0
    records_skipped: int = 0
    combiner_reduction_ratio: float = 0.0
    peak_memory_bytes: int = 0
    task_attempts: int = 0

    @property
    def total_time_seconds(self) -> float:
        """Total job execution time in seconds."""
        return self.end_time - self.start_time

    @property
    def map_phase_time_seconds(self) -> float:
        """Map phase execution time in seconds."""
        return self.map_phase_end - self.map_phase_start

    @property
    def reduce_phase_time_seconds(self) -> float:
        """Reduce phase execution time in seconds."""
        return self.reduce_phase_end - self.reduce_phase_start

    def to_dict(self) -> dict:
        """Convert metrics to dictionary."""
        data = asdict(self)
        data['total_time_seconds'] = self.total_time_seconds
        data['map_phase_time_seconds'] = self.map_phase_time_seconds
        data['reduce_phase_time_seconds'] = self.reduce_phase_time_seconds
        return data

    def save_to_file(self, filepath: str):
        """Save metrics to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


class MetricsCollector:
    """Collects and manages metrics for jobs run by this process."""

    def __init__(self):
        self.job_metrics = {}
        self.process = psutil.Process()
        self._lock = threading.Lock()

    def _sample_memory(self, job_id: str):
        rss = self.process.memory_info().rss
        metrics = self.job_metrics[job_id]
        metrics.peak_memory_bytes = max(metrics.peak_memory_bytes, rss)

    def start_job(self, job_id: str, num_map_tasks: int, num_reduce_tasks: int,
                  use_combiner: bool, input_path: str):
        """Initialize metrics tracking for a new job."""
        input_size = os.path.getsize(input_path) if os.path.exists(input_path) else 0

        with self._lock:
            self.job_metrics[job_id] = JobMetrics(
                job_id=job_id,
                start_time=time.time(),
                num_map_tasks=num_map_tasks,
                num_reduce_tasks=num_reduce_tasks,
                use_combiner=use_combiner,
                input_size_bytes=input_size,
                map_phase_start=time.time()
            )
            self._sample_memory(job_id)

    def record_map_result(self, job_id: str, result: dict):
        """Add one map task attempt's counters."""
        with self._lock:
            if job_id in self.job_metrics:
                metrics = self.job_metrics[job_id]
                metrics.task_attempts += 1
                if result['success']:
                    metrics.records_emitted += result['records_emitted']
                    metrics.records_shuffled += result['records_written']

    def record_reduce_result(self, job_id: str, result: dict):
        """Add one reduce task attempt's counters."""
        with self._lock:
            if job_id in self.job_metrics:
                metrics = self.job_metrics[job_id]
                metrics.task_attempts += 1
                if result['success']:
                    metrics.output_records += result['records_written']
                    metrics.records_skipped += result['records_skipped']

    def end_map_phase(self, job_id: str, intermediate_files: list):
        """Mark the end of the map phase and measure intermediate data."""
        with self._lock:
            if job_id in self.job_metrics:
                metrics = self.job_metrics[job_id]
                metrics.map_phase_end = time.time()
                metrics.intermediate_size_bytes = file_sizes(intermediate_files)
                if metrics.records_emitted > 0:
                    metrics.combiner_reduction_ratio = \
                        1.0 - (metrics.records_shuffled / metrics.records_emitted)
                self._sample_memory(job_id)

    def start_reduce_phase(self, job_id: str):
        """Mark the start of the reduce phase."""
        with self._lock:
            if job_id in self.job_metrics:
                self.job_metrics[job_id].reduce_phase_start = time.time()

    def end_job(self, job_id: str, output_files: list):
        """Mark job completion and calculate output size."""
        with self._lock:
            if job_id in self.job_metrics:
                metrics = self.job_metrics[job_id]
                now = time.time()
                if metrics.reduce_phase_start and not metrics.reduce_phase_end:
                    metrics.reduce_phase_end = now
                metrics.end_time = now
                metrics.output_size_bytes = file_sizes(output_files)
                self._sample_memory(job_id)

    def get_metrics(self, job_id: str) -> JobMetrics:
        """Retrieve metrics for a specific job."""
        return self.job_metrics.get(job_id)
