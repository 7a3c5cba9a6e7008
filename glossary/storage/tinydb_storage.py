""" Terms storage backed by a TinyDB JSON file. """
import json
import logging
import os
import tempfile
from typing import Iterable, List, Optional

from tinydb import TinyDB
from tinydb.storages import Storage
from tinydb.table import Document, Table

from glossary.models.term import Term
from .base_storage import TermsService, apply_term_rules, wrap_storage_error
from .exceptions import (
    DuplicateTermError,
    InvalidArgumentError,
    InvalidTermsStorageError,
    TermNotFoundError,
)


logger = logging.getLogger(__name__)

TERMS_TABLE = "terms"


class AtomicJSONStorage(Storage):
    """
    JSON storage for TinyDB that never creates its file on read
    and replaces it atomically on write.
    """

    def __init__(self, path, encoding: str = "utf-8", **kwargs):
        super().__init__()
        self.path = path
        self.encoding = encoding
        self.kwargs = kwargs

    def read(self) -> Optional[dict]:
        with open(self.path, "r", encoding=self.encoding) as f:
            content = f.read()

        if not content.strip():
            return None

        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {self.path}, got {type(data).__name__}")
        return data

    def write(self, data: dict) -> None:
        serialized = json.dumps(data, **self.kwargs)

        tmp_path = None
        try:
            directory = os.path.dirname(os.path.abspath(self.path))
            fd, tmp_path = tempfile.mkstemp(prefix=".terms-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding=self.encoding) as f:
                f.write(serialized)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


def term_to_document(term: Term) -> dict:
    document = {"name": term.name}
    if term.definition:
        document["definition"] = term.definition
    return document


def document_to_term(document: dict) -> Term:
    return Term(document["name"], document.get("definition", ""))


def replace_fields(term: Term):
    """ TinyDB update transform overwriting a document with `term`. """
    def transform(doc):
        doc["name"] = term.name
        if term.definition:
            doc["definition"] = term.definition
        else:
            doc.pop("definition", None)
    return transform


class TinyDBTermsService(TermsService):
    """
    Glossary terms stored in a TinyDB table.
    Same contract as the XML service; a new database handle is opened for
    every call so nothing is cached between operations.
    """

    def _open(self) -> TinyDB:
        return TinyDB(self.path, storage=AtomicJSONStorage, indent=2, ensure_ascii=False)

    def load_terms(self) -> List[Term]:
        with self._open() as db:
            documents = self._load_documents(db.table(TERMS_TABLE))

        try:
            terms = [apply_term_rules(document_to_term(doc), "term") for doc in documents]
        except ValueError as ex:
            raise wrap_storage_error(ex, InvalidTermsStorageError.to_load(self.path))

        logger.debug(f"Loaded {len(terms)} terms from {self.path}")
        return terms

    def add_term(self, term: Term) -> Term:
        apply_term_rules(term, "term")

        with self._open() as db:
            table = db.table(TERMS_TABLE)
            if self._find(self._load_documents(table), term.name) is not None:
                raise DuplicateTermError(term.name)

            self._persist(table.insert, term_to_document(term))

        logger.info(f"Added term '{term.name}' to {self.path}")
        return term

    def update_term(self, old_term: Term, new_term: Term) -> Term:
        apply_term_rules(old_term, "old_term")
        apply_term_rules(new_term, "new_term")

        with self._open() as db:
            table = db.table(TERMS_TABLE)
            documents = self._load_documents(table)

            document = self._find(documents, old_term.name)
            if document is None:
                raise TermNotFoundError(
                    old_term.name,
                    f"Unable to update term '{old_term.name}' because it doesn't exist."
                )

            if old_term.name != new_term.name and self._find(documents, new_term.name) is not None:
                raise DuplicateTermError(
                    new_term.name,
                    f"Unable to rename term to '{new_term.name}' because it already exists."
                )

            self._persist(table.update, replace_fields(new_term), doc_ids=[document.doc_id])

        logger.info(f"Updated term '{old_term.name}' in {self.path}")
        return new_term

    def remove_term(self, term: Term) -> Term:
        apply_term_rules(term, "term")

        with self._open() as db:
            table = db.table(TERMS_TABLE)

            document = self._find(self._load_documents(table), term.name)
            if document is None:
                raise TermNotFoundError(
                    term.name,
                    f"Unable to remove term '{term.name}' because it doesn't exist."
                )

            self._persist(table.remove, doc_ids=[document.doc_id])

        logger.info(f"Removed term '{term.name}' from {self.path}")
        return term

    def recreate_storage(self, terms: Iterable[Term]) -> None:
        """
        Replace the whole database with `terms`, in the given order.
        Every failure after the argument check is reported as
        InvalidTermsStorageError.
        """
        if terms is None:
            raise InvalidArgumentError("terms", "Argument 'terms' must not be None.")

        try:
            table = {}
            names = set()
            for term in terms:
                apply_term_rules(term, "terms")
                if term.name in names:
                    raise DuplicateTermError(term.name)
                names.add(term.name)
                table[str(len(table) + 1)] = term_to_document(term)

            # Written in a single call so the previous content is replaced as a whole.
            with self._open() as db:
                db.storage.write({TERMS_TABLE: table})
        except Exception as ex:
            raise wrap_storage_error(ex, InvalidTermsStorageError.to_save(self.path))

        logger.info(f"Recreated {self.path} with {len(names)} terms")

    @staticmethod
    def _find(documents: List[Document], name: str) -> Optional[Document]:
        for document in documents:
            if document["name"] == name:
                return document
        return None

    def _load_documents(self, table: Table) -> List[Document]:
        """ Read every document of the table and check the names are usable. """
        try:
            documents = table.all()
            names = set()
            for document in documents:
                name = document["name"]
                apply_term_rules(document_to_term(document), "term")
                if name in names:
                    raise ValueError(f"Duplicate term '{name}'")
                names.add(name)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as ex:
            raise InvalidTermsStorageError.to_load(self.path) from ex
        return documents

    def _persist(self, operation, *args, **kwargs):
        try:
            return operation(*args, **kwargs)
        except (OSError, ValueError, TypeError) as ex:
            raise InvalidTermsStorageError.to_save(self.path) from ex
