"""
Local job runner.
Drives a bigram job through its map and reduce phases on a thread pool.
"""

import os
import time
import shutil
import logging
import tempfile
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional

from bigram_mr.common.config import JobConfig, WORK_DIR
from bigram_mr.common.errors import JobFailedError, TaskFailedError
from bigram_mr.common.records import intermediate_filename
from bigram_mr.coordinator.job_manager import Job, JobManager, JobStatus, MapTask, ReduceTask
from bigram_mr.coordinator.metrics import MetricsCollector
from bigram_mr.worker.map_executor import MapExecutor
from bigram_mr.worker.reduce_executor import ReduceExecutor

logger = logging.getLogger(__name__)


class LocalJobRunner:
    """Runs bigram jobs in this process"""

    def __init__(self, job_manager: Optional[JobManager] = None,
                 metrics: Optional[MetricsCollector] = None):
        self.job_manager = job_manager or JobManager()
        self.metrics = metrics or MetricsCollector()

    def run(self, config: JobConfig) -> Job:
        """
        Run a job to completion

        Returns:
            The completed Job

        Raises:
            ConfigError: If the configuration is invalid
            JobFailedError: If any task fails permanently
        """
        config.validate()
        self._prepare_output(config)

        owns_intermediate_dir = config.intermediate_dir is None
        if owns_intermediate_dir:
            intermediate_dir = tempfile.mkdtemp(prefix=f"bigram-{config.job_id}-", dir=WORK_DIR)
        else:
            intermediate_dir = config.intermediate_dir
            os.makedirs(intermediate_dir, exist_ok=True)

        job = self.job_manager.create_job(config, intermediate_dir)
        logger.info(f"Job {job.job_id}: bigram relative frequency")
        logger.info(f" - input path: {config.input_path}")
        logger.info(f" - output path: {config.output_path}")
        logger.info(f" - number of map tasks: {config.num_map_tasks}")
        logger.info(f" - number of reduce tasks: {config.num_reduce_tasks}")
        logger.info(f" - combiner: {'on' if config.use_combiner else 'off'}")

        self.metrics.start_job(job.job_id, config.num_map_tasks, config.num_reduce_tasks,
                               config.use_combiner, config.input_path)
        start_time = time.time()

        try:
            self.job_manager.set_job_status(job, JobStatus.MAP_PHASE)
            map_tasks = self.job_manager.generate_map_tasks(job)
            self._run_phase(job, map_tasks, self._execute_map_task)
            self.metrics.end_map_phase(
                job.job_id, [f for t in map_tasks for f in t.intermediate_files])

            self.job_manager.set_job_status(job, JobStatus.REDUCE_PHASE)
            self.metrics.start_reduce_phase(job.job_id)
            reduce_tasks = self.job_manager.generate_reduce_tasks(job)
            self._run_phase(job, reduce_tasks, self._execute_reduce_task)
            self.metrics.end_job(job.job_id, [t.output_file for t in reduce_tasks])

        except TaskFailedError as e:
            self.job_manager.set_job_status(job, JobStatus.FAILED, str(e))
            self.metrics.end_job(job.job_id, [])
            self._discard_output(job)
            logger.error(f"Job {job.job_id} failed: {e}")
            raise JobFailedError(job.job_id, str(e)) from e

        finally:
            if not config.keep_intermediate:
                self._discard_intermediate(job, owns_intermediate_dir)

        self.job_manager.set_job_status(job, JobStatus.COMPLETED)
        logger.info(f"Job {job.job_id} finished in {time.time() - start_time:.3f} seconds")
        return job

    def _prepare_output(self, config: JobConfig):
        """Clear existing output when the job is allowed to overwrite it"""
        if config.overwrite_output and os.path.exists(config.output_path):
            logger.info(f"Removing existing output directory {config.output_path}")
            shutil.rmtree(config.output_path)
        os.makedirs(config.output_path, exist_ok=True)

    def _discard_intermediate(self, job: Job, owns_dir: bool):
        """
        Remove a job's intermediate data.

        A directory created by the runner is removed whole. In a directory
        supplied by the caller only the files map tasks could have written
        are removed, including those of failed attempts.
        """
        if owns_dir:
            shutil.rmtree(job.intermediate_dir, ignore_errors=True)
            return

        for task in job.map_tasks:
            for partition_id in range(job.config.num_reduce_tasks):
                path = intermediate_filename(job.intermediate_dir, task.task_id, partition_id)
                if os.path.exists(path):
                    os.remove(path)

    def _discard_output(self, job: Job):
        """Remove part files of a failed job; they are not meaningful on their own"""
        for task in job.reduce_tasks:
            if task.output_file and os.path.exists(task.output_file):
                os.remove(task.output_file)

    def _run_phase(self, job: Job, tasks: list, execute: Callable):
        """Run every task of one phase and wait for all of them"""
        with ThreadPoolExecutor(max_workers=job.config.max_workers) as pool:
            futures = [pool.submit(self._run_task, job, task, execute) for task in tasks]
            try:
                for future in as_completed(futures):
                    future.result()
                    progress = self.job_manager.get_job_progress(job.job_id)
                    logger.info(f"Job {job.job_id}: {progress['progress_percentage']}% complete")
            except TaskFailedError:
                for future in futures:
                    future.cancel()
                raise

    def _run_task(self, job: Job, task, execute: Callable):
        """
        Run a task, restarting it from scratch on a retryable failure

        Raises:
            TaskFailedError: When the failure is not retryable or attempts run out
        """
        task_type = 'Map' if isinstance(task, MapTask) else 'Reduce'
        while True:
            self.job_manager.mark_task_running(task)
            result = execute(job, task)

            if result['success']:
                self.job_manager.mark_task_completed(task)
                return result

            self.job_manager.mark_task_failed(task, result['error_message'])
            if not result['retryable'] or task.attempts >= job.config.max_task_attempts:
                logger.error(f"{task_type} task {task.task_id} failed permanently after "
                             f"{task.attempts} attempt(s)")
                raise TaskFailedError(task_type, task.task_id, result['error_message'])

            logger.warning(f"{task_type} task {task.task_id} queued for retry "
                           f"({task.attempts}/{job.config.max_task_attempts})")

    def _execute_map_task(self, job: Job, task: MapTask) -> dict:
        executor = MapExecutor(
            task_id=task.task_id,
            input_path=task.input_path,
            start_offset=task.start_offset,
            end_offset=task.end_offset,
            num_reduce_tasks=job.config.num_reduce_tasks,
            intermediate_dir=job.intermediate_dir,
            use_combiner=job.config.use_combiner,
            job_id=job.job_id,
            max_token_length=job.config.max_token_length
        )
        result = executor.execute()
        self.metrics.record_map_result(job.job_id, result)
        if result['success']:
            task.intermediate_files = result['intermediate_files']
        return result

    def _execute_reduce_task(self, job: Job, task: ReduceTask) -> dict:
        executor = ReduceExecutor(
            task_id=task.task_id,
            partition_id=task.partition_id,
            intermediate_files=task.intermediate_files,
            output_path=job.config.output_path,
            job_id=job.job_id
        )
        result = executor.execute()
        self.metrics.record_reduce_result(job.job_id, result)
        if result['success']:
            task.output_file = result['output_file']
        return result


def run_job(config: JobConfig) -> Job:
    """Run a single job with a fresh runner"""
    return LocalJobRunner().run(config)
