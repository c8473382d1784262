"""
Unit tests for JobManager
Tests job creation, map task generation, reduce task generation, and status tracking
"""

import os
import shutil
import tempfile
import unittest

from bigram_mr.common.config import JobConfig
from bigram_mr.coordinator.job_manager import JobManager, JobStatus, TaskStatus


class TestJobManager(unittest.TestCase):
    """Unit tests for JobManager class"""

    def setUp(self):
        """Set up test fixtures"""
        self.temp_dir = tempfile.mkdtemp()
        self.input_path = os.path.join(self.temp_dir, 'input.txt')
        with open(self.input_path, 'w') as f:
            f.write("a" * 1000)  # 1000 bytes

        self.job_manager = JobManager()
        self.config = JobConfig(
            input_path=self.input_path,
            output_path=os.path.join(self.temp_dir, 'output'),
            num_map_tasks=4,
            num_reduce_tasks=2,
            job_id="test-job-1"
        )

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_create_job(self):
        """Test job creation with correct attributes"""
        job = self.job_manager.create_job(self.config, self.temp_dir)

        self.assertEqual(job.job_id, "test-job-1")
        self.assertIs(job.config, self.config)
        self.assertEqual(job.intermediate_dir, self.temp_dir)
        self.assertEqual(job.status, JobStatus.PENDING)
        self.assertEqual(len(job.map_tasks), 0)
        self.assertEqual(len(job.reduce_tasks), 0)
        self.assertGreater(job.start_time, 0)
        self.assertIs(self.job_manager.get_job("test-job-1"), job)

    def test_generate_map_tasks_with_proper_offsets(self):
        """Test map task generation with correct file offsets"""
        job = self.job_manager.create_job(self.config, self.temp_dir)
        map_tasks = self.job_manager.generate_map_tasks(job)

        self.assertEqual(len(map_tasks), 4)
        self.assertEqual([(t.start_offset, t.end_offset) for t in map_tasks],
                         [(0, 250), (250, 500), (500, 750), (750, 1000)])
        for task in map_tasks:
            self.assertEqual(task.status, TaskStatus.PENDING)
            self.assertEqual(task.input_path, self.input_path)

    def test_last_map_task_reaches_end_of_file(self):
        """Test that uneven sizes leave no gap at the end"""
        self.config.num_map_tasks = 3
        job = self.job_manager.create_job(self.config, self.temp_dir)
        map_tasks = self.job_manager.generate_map_tasks(job)

        self.assertEqual(map_tasks[-1].end_offset, 1000)
        for previous, current in zip(map_tasks, map_tasks[1:]):
            self.assertEqual(previous.end_offset, current.start_offset)

    def test_more_map_tasks_than_bytes(self):
        """Test splitting a tiny file"""
        with open(self.input_path, 'w') as f:
            f.write("ab")
        self.config.num_map_tasks = 4
        job = self.job_manager.create_job(self.config, self.temp_dir)
        map_tasks = self.job_manager.generate_map_tasks(job)

        self.assertEqual(len(map_tasks), 4)
        self.assertEqual(map_tasks[0].start_offset, 0)
        self.assertEqual(map_tasks[-1].end_offset, 2)

    def test_generate_reduce_tasks_assigns_partition_files(self):
        """Test that reduce tasks collect files of their own partition"""
        job = self.job_manager.create_job(self.config, self.temp_dir)
        map_tasks = self.job_manager.generate_map_tasks(job)
        map_tasks[0].intermediate_files = ['/im/map-0-reduce-0.txt', '/im/map-0-reduce-1.txt']
        map_tasks[1].intermediate_files = ['/im/map-1-reduce-1.txt']
        map_tasks[2].intermediate_files = ['/im/map-2-reduce-0.txt']

        reduce_tasks = self.job_manager.generate_reduce_tasks(job)

        self.assertEqual(len(reduce_tasks), 2)
        self.assertEqual(reduce_tasks[0].partition_id, 0)
        self.assertEqual(reduce_tasks[0].intermediate_files,
                         ['/im/map-0-reduce-0.txt', '/im/map-2-reduce-0.txt'])
        self.assertEqual(reduce_tasks[1].intermediate_files,
                         ['/im/map-0-reduce-1.txt', '/im/map-1-reduce-1.txt'])

    def test_partition_suffix_is_exact(self):
        """Test that partition 1 does not pick up partition 11"""
        self.config.num_reduce_tasks = 12
        job = self.job_manager.create_job(self.config, self.temp_dir)
        map_tasks = self.job_manager.generate_map_tasks(job)
        map_tasks[0].intermediate_files = ['/im/map-0-reduce-11.txt']

        reduce_tasks = self.job_manager.generate_reduce_tasks(job)

        self.assertEqual(reduce_tasks[1].intermediate_files, [])
        self.assertEqual(reduce_tasks[11].intermediate_files, ['/im/map-0-reduce-11.txt'])

    def test_task_status_transitions(self):
        """Test running/failed/completed bookkeeping and attempt counting"""
        job = self.job_manager.create_job(self.config, self.temp_dir)
        task = self.job_manager.generate_map_tasks(job)[0]

        self.job_manager.mark_task_running(task)
        self.assertEqual(task.status, TaskStatus.RUNNING)
        self.assertEqual(task.attempts, 1)

        self.job_manager.mark_task_failed(task, "boom")
        self.assertEqual(task.status, TaskStatus.FAILED)
        self.assertEqual(task.error_message, "boom")

        self.job_manager.mark_task_running(task)
        self.job_manager.mark_task_completed(task)
        self.assertEqual(task.status, TaskStatus.COMPLETED)
        self.assertEqual(task.attempts, 2)
        self.assertEqual(task.error_message, "")

    def test_job_status_sets_end_time_when_finished(self):
        job = self.job_manager.create_job(self.config, self.temp_dir)

        self.job_manager.set_job_status(job, JobStatus.MAP_PHASE)
        self.assertEqual(job.end_time, 0.0)

        self.job_manager.set_job_status(job, JobStatus.FAILED, "Map task 0 failed")
        self.assertEqual(job.status, JobStatus.FAILED)
        self.assertEqual(job.error_message, "Map task 0 failed")
        self.assertGreater(job.end_time, 0)

    def test_get_job_progress(self):
        """Test progress calculation"""
        job = self.job_manager.create_job(self.config, self.temp_dir)
        map_tasks = self.job_manager.generate_map_tasks(job)
        self.job_manager.generate_reduce_tasks(job)

        for task in map_tasks[:3]:
            self.job_manager.mark_task_completed(task)

        progress = self.job_manager.get_job_progress("test-job-1")
        self.assertEqual(progress['completed_map_tasks'], 3)
        self.assertEqual(progress['total_map_tasks'], 4)
        self.assertEqual(progress['completed_reduce_tasks'], 0)
        self.assertEqual(progress['total_reduce_tasks'], 2)
        self.assertEqual(progress['progress_percentage'], 50.0)
        self.assertEqual(progress['status'], 'pending')

    def test_progress_for_unknown_job(self):
        self.assertEqual(self.job_manager.get_job_progress("missing"), {})


if __name__ == '__main__':
    unittest.main()
