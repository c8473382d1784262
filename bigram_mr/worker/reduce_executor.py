"""
Reduce Task Executor
Reads a partition's intermediate data, groups and orders it marginal-first,
normalizes counts into relative frequencies and writes final output
"""

import os
import time
import logging
from collections import defaultdict

from bigram_mr.common.errors import OrderingViolation
from bigram_mr.common.records import output_filename, read_intermediate, write_output
from bigram_mr.worker.normalizer import RelativeFrequencyNormalizer, order_keys

logger = logging.getLogger(__name__)


class ReduceExecutor:
    """Executes a single reduce task"""

    def __init__(self, task_id: int, partition_id: int, intermediate_files: list,
                 output_path: str, job_id: str):
        """
        Initialize the reduce executor

        Args:
            task_id: Unique ID for this reduce task
            partition_id: Partition ID this reduce task is responsible for
            intermediate_files: List of intermediate file paths to read
            output_path: Directory path where final output should be written
            job_id: Unique job identifier
        """
        self.task_id = task_id
        self.partition_id = partition_id
        self.intermediate_files = intermediate_files
        self.output_path = output_path
        self.job_id = job_id
        self.records_skipped = 0

    def execute(self) -> dict:
        """
        Execute the reduce task

        Returns:
            Dictionary with 'success', 'execution_time_ms', 'error_message',
            'retryable', 'output_file', 'records_written' and 'records_skipped'
            fields
        """
        start_time = time.time()

        try:
            logger.info(f"Reduce task {self.task_id}: Reading and grouping intermediate data")
            key_groups = self._read_and_group_intermediate()
            logger.info(f"Reduce task {self.task_id}: Grouped {len(key_groups)} unique keys")

            # Fresh state per group; nothing carries over between reduce tasks
            normalizer = RelativeFrequencyNormalizer()
            results = normalizer.run((key, key_groups[key]) for key in order_keys(key_groups))

            os.makedirs(self.output_path, exist_ok=True)
            output_file = output_filename(self.output_path, self.partition_id)
            records_written = write_output(output_file, results)
            logger.info(f"Reduce task {self.task_id}: Wrote {records_written} records to {output_file}")

            execution_time = int((time.time() - start_time) * 1000)
            logger.info(f"Reduce task {self.task_id}: Completed in {execution_time}ms")

            return {
                'success': True,
                'execution_time_ms': execution_time,
                'error_message': '',
                'retryable': False,
                'output_file': output_file,
                'records_written': records_written,
                'records_skipped': self.records_skipped,
            }

        except Exception as e:
            execution_time = int((time.time() - start_time) * 1000)
            logger.error(f"Reduce task {self.task_id} failed: {e}")
            return {
                'success': False,
                'execution_time_ms': execution_time,
                'error_message': str(e),
                # Re-running the group would hit the same ordering violation
                'retryable': not isinstance(e, OrderingViolation),
                'output_file': '',
                'records_written': 0,
                'records_skipped': self.records_skipped,
            }

    def _read_and_group_intermediate(self) -> dict:
        """
        Read all intermediate files and group by key

        Returns:
            Dictionary mapping BigramKey to list of weights
        """
        key_groups = defaultdict(list)
        stats = {'processed': 0, 'skipped': 0}
        files_read = 0

        for filepath in self.intermediate_files:
            if not os.path.exists(filepath):
                raise FileNotFoundError(f"Intermediate file not found: {filepath}")

            files_read += 1
            for key, value in read_intermediate(filepath, stats):
                key_groups[key].append(value)

        self.records_skipped = stats['skipped']
        logger.info(f"Reduce task {self.task_id}: Read {files_read} files, processed {stats['processed']} "
                    f"records, skipped {stats['skipped']} malformed records")
        return key_groups
