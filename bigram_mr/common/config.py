"""
Job configuration for the local MapReduce engine
"""

import os
import uuid
import tempfile
from dataclasses import dataclass, field, asdict
from typing import Optional

from bigram_mr.common.errors import ConfigError
from bigram_mr.common.keys import MAX_TOKEN_LENGTH

# Configuration from environment
WORK_DIR = os.getenv('BIGRAM_WORK_DIR', tempfile.gettempdir())
LOG_LEVEL = os.getenv('BIGRAM_LOG_LEVEL', 'INFO')


@dataclass
class JobConfig:
    """Everything needed to run one bigram relative-frequency job"""

    input_path: str
    output_path: str
    num_map_tasks: int = 4
    num_reduce_tasks: int = 2
    use_combiner: bool = True
    max_token_length: int = MAX_TOKEN_LENGTH
    overwrite_output: bool = True
    max_workers: int = 4
    max_task_attempts: int = 3
    intermediate_dir: Optional[str] = None
    keep_intermediate: bool = False
    job_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def validate(self):
        """
        Check the configuration before a job starts

        Raises:
            ConfigError: If any setting is out of range or a path is unusable
        """
        for name in ('num_map_tasks', 'num_reduce_tasks', 'max_token_length',
                     'max_workers', 'max_task_attempts'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")

        if not os.path.isfile(self.input_path):
            raise ConfigError(f"Input file not found: {self.input_path}")

        if os.path.exists(self.output_path):
            if not os.path.isdir(self.output_path):
                raise ConfigError(f"Output path is not a directory: {self.output_path}")
            if not self.overwrite_output and os.listdir(self.output_path):
                raise ConfigError(
                    f"Output directory {self.output_path} is not empty and overwrite is disabled")

    def to_dict(self) -> dict:
        return asdict(self)
