""" Errors raised by terms storage services. """
from typing import Optional


class TermsServiceError(Exception):
    """ Base class for every error raised by a terms service. """


class InvalidArgumentError(TermsServiceError, ValueError):
    """ A caller passed a missing or malformed argument. """

    def __init__(self, argument: str, message: Optional[str] = None):
        self.argument = argument
        super().__init__(message or f"Invalid value for argument '{argument}'.")


class DuplicateTermError(TermsServiceError):
    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(message or f"Unable to add term '{name}' because it already exists.")


class TermNotFoundError(TermsServiceError):
    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(message or f"Term '{name}' doesn't exist.")


class InvalidTermsStorageError(TermsServiceError):
    """
    The storage file is missing, corrupt or cannot be written.
    The original fault is chained as __cause__.
    """

    def __init__(self, path, message: Optional[str] = None):
        self.path = path
        super().__init__(message or f"Terms storage '{path}' is invalid.")

    @classmethod
    def to_load(cls, path):
        return cls(path, f"Terms storage '{path}' is invalid and cannot be loaded.")

    @classmethod
    def to_save(cls, path):
        return cls(path, f"Terms storage '{path}' is invalid and cannot be saved.")
