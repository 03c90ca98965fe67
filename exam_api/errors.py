"""Exceptions raised by the service layer."""


class ExamBuilderError(Exception):
    """Base class for service errors."""


class StorageError(ExamBuilderError):
    """A document store or blob storage operation failed."""


class TestNotFoundError(ExamBuilderError):
    """The requested test does not exist."""

    __test__ = False  # not a pytest test class

    def __init__(self, test_id: str):
        super().__init__(f"Test not found: {test_id}")
        self.test_id = test_id


class GenerationError(ExamBuilderError):
    """A generative AI call returned no usable output.

    `message` is shown to the user as-is.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
