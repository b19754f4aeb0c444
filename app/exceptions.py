"""Error taxonomy shared by the task workflow services"""


class TaskWorkflowError(Exception):
    """Base class for errors raised by the task workflow core"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TaskWorkflowError):
    """A required field is missing or a value is malformed"""

    status_code = 400


class NotFoundError(TaskWorkflowError):
    """A referenced task does not exist"""

    status_code = 404


class ConflictError(TaskWorkflowError):
    """
    The mutation conflicts with the current task graph:
    completing a task whose dependencies are not completed,
    or deleting a task other tasks depend on.
    """

    status_code = 409


class StorageError(TaskWorkflowError):
    """The persistence layer failed. Not retried."""

    status_code = 500
