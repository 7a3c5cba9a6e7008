from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from glossary.models.term import Term
from glossary.utils.print import safe_pretty_print
from .exceptions import InvalidArgumentError, InvalidTermsStorageError


def apply_term_rules(term: Optional[Term], argument: str) -> Term:
    """
    Common validation for every term handed to a storage service.

    Raises:
        InvalidArgumentError: if the term is missing or its name is
            empty or whitespace only.
    """
    if term is None:
        raise InvalidArgumentError(argument, f"Argument '{argument}' must not be None.")
    if not isinstance(term, Term) or not term.has_valid_name():
        raise InvalidArgumentError(
            argument,
            f"Argument '{argument}' must be a term with a non-blank name, got:\n"
            f"{safe_pretty_print(term)}"
        )
    return term


def wrap_storage_error(ex: Exception, error: InvalidTermsStorageError) -> InvalidTermsStorageError:
    """ Return `ex` if it is already a storage error, otherwise `error` chained to `ex`. """
    if isinstance(ex, InvalidTermsStorageError):
        return ex
    error.__cause__ = ex
    return error


class TermsService(ABC):
    """
    Base storage interface for glossary terms.
    Every operation works on the whole document currently on disk.
    """

    def __init__(self, path):
        if path is None:
            raise InvalidArgumentError("path", "Argument 'path' must not be None.")
        self.path = path

    @abstractmethod
    def load_terms(self) -> List[Term]:
        pass

    @abstractmethod
    def add_term(self, term: Term) -> Term:
        pass

    @abstractmethod
    def update_term(self, old_term: Term, new_term: Term) -> Term:
        pass

    @abstractmethod
    def remove_term(self, term: Term) -> Term:
        pass

    @abstractmethod
    def recreate_storage(self, terms: Iterable[Term]) -> None:
        pass

    def __repr__(self):
        return f"{self.__class__.__name__}({str(self.path)!r})"
