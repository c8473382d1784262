"""
Job Manager for the local MapReduce engine
Handles job state management, task generation, and progress tracking
"""

import threading
from enum import Enum
from dataclasses import dataclass, field
from typing import List, Dict, Optional
import time
import os

from bigram_mr.common.config import JobConfig


class JobStatus(Enum):
    """Status of a MapReduce job"""
    PENDING = "pending"
    MAP_PHASE = "map_phase"
    REDUCE_PHASE = "reduce_phase"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskStatus(Enum):
    """Status of individual map or reduce tasks"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class MapTask:
    """Represents a single map task"""
    task_id: int
    input_path: str
    start_offset: int
    end_offset: int
    status: TaskStatus = TaskStatus.PENDING
    attempts: int = 0
    error_message: str = ""
    intermediate_files: List[str] = field(default_factory=list)


@dataclass
class ReduceTask:
    """Represents a single reduce task"""
    task_id: int
    partition_id: int
    intermediate_files: List[str] = field(default_factory=list)
    status: TaskStatus = TaskStatus.PENDING
    attempts: int = 0
    error_message: str = ""
    output_file: str = ""


@dataclass
class Job:
    """Represents a complete MapReduce job"""
    job_id: str
    config: JobConfig
    intermediate_dir: str
    status: JobStatus = JobStatus.PENDING
    map_tasks: List[MapTask] = field(default_factory=list)
    reduce_tasks: List[ReduceTask] = field(default_factory=list)
    start_time: float = 0.0
    end_time: float = 0.0
    error_message: str = ""


class JobManager:
    """Manages MapReduce jobs and their lifecycle"""

    def __init__(self):
        self.jobs: Dict[str, Job] = {}
        self.lock = threading.Lock()

    def create_job(self, config: JobConfig, intermediate_dir: str) -> Job:
        """Create new job from configuration"""
        with self.lock:
            job = Job(
                job_id=config.job_id,
                config=config,
                intermediate_dir=intermediate_dir,
                start_time=time.time()
            )
            self.jobs[job.job_id] = job
            return job

    def get_job(self, job_id: str) -> Optional[Job]:
        with self.lock:
            return self.jobs.get(job_id)

    def generate_map_tasks(self, job: Job) -> List[MapTask]:
        """Split input file into M byte ranges, one map task each"""
        num_map_tasks = job.config.num_map_tasks
        file_size = os.path.getsize(job.config.input_path)

        map_tasks = []
        for i in range(num_map_tasks):
            start = i * file_size // num_map_tasks
            end = file_size if i == num_map_tasks - 1 else (i + 1) * file_size // num_map_tasks

            task = MapTask(
                task_id=i,
                input_path=job.config.input_path,
                start_offset=start,
                end_offset=end
            )
            map_tasks.append(task)

        job.map_tasks = map_tasks
        return map_tasks

    def generate_reduce_tasks(self, job: Job) -> List[ReduceTask]:
        """Create R reduce tasks with intermediate file assignments"""
        suffixes = {
            partition_id: f"-reduce-{partition_id}.txt"
            for partition_id in range(job.config.num_reduce_tasks)
        }

        reduce_tasks = []
        for partition_id, suffix in suffixes.items():
            intermediate_files = sorted(
                path
                for map_task in job.map_tasks
                for path in map_task.intermediate_files
                if path.endswith(suffix)
            )

            task = ReduceTask(
                task_id=partition_id,
                partition_id=partition_id,
                intermediate_files=intermediate_files
            )
            reduce_tasks.append(task)

        job.reduce_tasks = reduce_tasks
        return reduce_tasks

    def mark_task_running(self, task):
        with self.lock:
            task.status = TaskStatus.RUNNING
            task.attempts += 1

    def mark_task_completed(self, task):
        with self.lock:
            task.status = TaskStatus.COMPLETED
            task.error_message = ""

    def mark_task_failed(self, task, error_message: str):
        with self.lock:
            task.status = TaskStatus.FAILED
            task.error_message = error_message

    def set_job_status(self, job: Job, status: JobStatus, error_message: str = ""):
        with self.lock:
            job.status = status
            if error_message:
                job.error_message = error_message
            if status in (JobStatus.COMPLETED, JobStatus.FAILED):
                job.end_time = time.time()

    def get_job_progress(self, job_id: str) -> Dict:
        """Get job progress information"""
        with self.lock:
            job = self.jobs.get(job_id)
            if not job:
                return {}

            completed_maps = sum(1 for t in job.map_tasks if t.status == TaskStatus.COMPLETED)
            completed_reduces = sum(1 for t in job.reduce_tasks if t.status == TaskStatus.COMPLETED)

            total_tasks = job.config.num_map_tasks + job.config.num_reduce_tasks
            completed_tasks = completed_maps + completed_reduces
            progress = (completed_tasks / total_tasks * 100) if total_tasks > 0 else 0

            return {
                'job_id': job.job_id,
                'status': job.status.value,
                'progress_percentage': round(progress, 1),
                'completed_map_tasks': completed_maps,
                'total_map_tasks': job.config.num_map_tasks,
                'completed_reduce_tasks': completed_reduces,
                'total_reduce_tasks': job.config.num_reduce_tasks,
                'error_message': job.error_message
            }
