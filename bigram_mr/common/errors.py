"""
Exception types shared by the coordinator, the workers and the client
"""


class BigramError(Exception):
    """Base class for all job errors"""


class ConfigError(BigramError):
    """Raised when a job configuration is invalid"""


class OrderingViolation(BigramError):
    """
    Raised when a reduce group's key stream breaks the marginal-first contract.

    The shuffle must deliver every key sharing a first word contiguously, with
    the marginal key (first, "*") ahead of the others. Normalizing without the
    marginal would produce a meaningless ratio, so the whole group is aborted.
    """

    def __init__(self, message: str, key=None):
        super().__init__(message)
        self.key = key


class TaskFailedError(BigramError):
    """Raised when a map or reduce task has used up all of its attempts"""

    def __init__(self, task_type: str, task_id: int, error_message: str):
        super().__init__(f"{task_type} task {task_id} failed: {error_message}")
        self.task_type = task_type
        self.task_id = task_id
        self.error_message = error_message


class JobFailedError(BigramError):
    """Raised when a job cannot complete"""

    def __init__(self, job_id: str, reason: str):
        super().__init__(f"Job {job_id} failed: {reason}")
        self.job_id = job_id
        self.reason = reason
