"""
Map Task Executor
Reads an input split, emits bigrams, partitions them by first word,
optionally combines them and writes intermediate files
"""

import os
import time
import logging
from collections import defaultdict

from bigram_mr.common.keys import MAX_TOKEN_LENGTH
from bigram_mr.common.records import intermediate_filename, write_intermediate
from bigram_mr.worker.combiner import combine_partitions
from bigram_mr.worker.partitioner import partition
from bigram_mr.worker.tokenizer import map_fn

logger = logging.getLogger(__name__)


class MapExecutor:
    """Executes a single map task"""

    def __init__(self, task_id: int, input_path: str, start_offset: int,
                 end_offset: int, num_reduce_tasks: int, intermediate_dir: str,
                 use_combiner: bool, job_id: str,
                 max_token_length: int = MAX_TOKEN_LENGTH):
        """
        Initialize the map executor

        Args:
            task_id: Unique ID for this map task
            input_path: Path to input file
            start_offset: Byte offset where this task should start reading
            end_offset: Byte offset where this task should stop reading
            num_reduce_tasks: Number of reduce tasks (for partitioning)
            intermediate_dir: Directory receiving this task's partition files
            use_combiner: Whether to apply combiner function
            job_id: Unique job identifier
            max_token_length: Words are cut to this many characters
        """
        self.task_id = task_id
        self.input_path = input_path
        self.start_offset = start_offset
        self.end_offset = end_offset
        self.num_reduce_tasks = num_reduce_tasks
        self.intermediate_dir = intermediate_dir
        self.use_combiner = use_combiner
        self.job_id = job_id
        self.max_token_length = max_token_length

    def execute(self) -> dict:
        """
        Execute the map task

        Returns:
            Dictionary with 'success', 'execution_time_ms', 'error_message',
            'retryable', 'intermediate_files', 'records_emitted' and
            'records_written' fields
        """
        start_time = time.time()

        try:
            logger.info(f"Map task {self.task_id}: Reading input split "
                        f"[{self.start_offset}, {self.end_offset})")
            key_values = self._read_input_split()

            logger.info(f"Map task {self.task_id}: Processing {len(key_values)} lines")
            intermediate = defaultdict(list)
            records_emitted = 0
            for key, value in key_values:
                for out_key, out_value in map_fn(key, value, self.max_token_length):
                    intermediate[partition(out_key, self.num_reduce_tasks)].append((out_key, out_value))
                    records_emitted += 1

            logger.info(f"Map task {self.task_id}: Generated {records_emitted} intermediate pairs")

            if self.use_combiner:
                intermediate = combine_partitions(intermediate)
                logger.info(f"Map task {self.task_id}: After combiner: "
                            f"{sum(len(v) for v in intermediate.values())} pairs")

            files, records_written = self._write_intermediate_files(intermediate)

            execution_time = int((time.time() - start_time) * 1000)
            logger.info(f"Map task {self.task_id}: Completed in {execution_time}ms")

            return {
                'success': True,
                'execution_time_ms': execution_time,
                'error_message': '',
                'retryable': False,
                'intermediate_files': files,
                'records_emitted': records_emitted,
                'records_written': records_written,
            }

        except Exception as e:
            execution_time = int((time.time() - start_time) * 1000)
            logger.error(f"Map task {self.task_id} failed: {e}")
            return {
                'success': False,
                'execution_time_ms': execution_time,
                'error_message': str(e),
                'retryable': True,
                'intermediate_files': [],
                'records_emitted': 0,
                'records_written': 0,
            }

    def _read_input_split(self):
        """
        Read the lines whose first byte falls inside this task's byte range

        Returns:
            List of (byte_offset, line_content) tuples
        """
        key_values = []

        with open(self.input_path, 'rb') as f:
            # A line starting exactly at start_offset belongs to this split,
            # so back up one byte before skipping the partial line
            if self.start_offset > 0:
                f.seek(self.start_offset - 1)
                f.readline()

            while f.tell() < self.end_offset:
                offset = f.tell()
                line = f.readline()
                if not line:
                    break
                key_values.append((offset, line.decode('utf-8', errors='ignore').rstrip('\r\n')))

        return key_values

    def _write_intermediate_files(self, intermediate: dict):
        """
        Write one JSON-lines file per non-empty partition

        Returns:
            Tuple of (list of file paths, number of records written)
        """
        os.makedirs(self.intermediate_dir, exist_ok=True)

        files = []
        records_written = 0
        for partition_id, kv_pairs in sorted(intermediate.items()):
            if not kv_pairs:
                continue
            filename = intermediate_filename(self.intermediate_dir, self.task_id, partition_id)
            records_written += write_intermediate(filename, kv_pairs)
            files.append(filename)

        return files, records_written
