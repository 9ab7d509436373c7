"""Error taxonomy for validation runs.

Every failure a run can hit is classified here so the orchestrator can
turn it into a terminal record and the HTTP layer can pick a status code.
"""


class IdeaValidationError(Exception):
    """Base class for all validation pipeline errors."""
    pass


class PreconditionError(IdeaValidationError):
    """A required input (e.g. the refined idea) is absent."""
    pass


class ProviderOverloadError(IdeaValidationError):
    """Generative-text provider reported a transient capacity problem."""
    pass


class ServiceUnavailableError(IdeaValidationError):
    """Provider stayed overloaded after all retry attempts."""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class ParseError(IdeaValidationError):
    """Structured output could not be recovered from provider text."""

    def __init__(self, message: str, failures: list | None = None):
        super().__init__(message)
        self.failures = failures or []


class StorageError(IdeaValidationError):
    """Record store could not read or write a document."""
    pass


class TransientStorageError(StorageError):
    """A read kept racing a concurrent write past its retry budget."""
    pass


class StepExecutionError(IdeaValidationError):
    """Any other failure inside a pipeline step."""

    def __init__(self, message: str, step_index: int | None = None):
        super().__init__(message)
        self.step_index = step_index


class StepTransitionError(StepExecutionError):
    """Illegal step status change requested."""
    pass
