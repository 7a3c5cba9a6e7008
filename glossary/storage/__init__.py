"""
Submodule for all storage logic.
Backed by pluggable storage implementations (XML file or TinyDB).
"""
from pathlib import Path
from typing import Optional

from .base_storage import TermsService, apply_term_rules
from .exceptions import (
    DuplicateTermError,
    InvalidArgumentError,
    InvalidTermsStorageError,
    TermNotFoundError,
    TermsServiceError,
)
from .tinydb_storage import TinyDBTermsService
from .xml_storage import XmlTermsService

BACKENDS = {
    "xml": XmlTermsService,
    "tinydb": TinyDBTermsService,
}


def create_terms_service(path, backend: Optional[str] = None) -> TermsService:
    """
    Build the terms service for `path`.
    Without an explicit backend, `.json` files use TinyDB and anything else XML.
    """
    if path is None:
        raise InvalidArgumentError("path", "Argument 'path' must not be None.")

    if backend is None:
        backend = "tinydb" if Path(path).suffix.lower() == ".json" else "xml"

    if backend not in BACKENDS:
        raise ValueError(f"Unknown storage backend '{backend}', expected one of {sorted(BACKENDS)}")

    return BACKENDS[backend](path)


__all__ = [
    "TermsService",
    "XmlTermsService",
    "TinyDBTermsService",
    "create_terms_service",
    "apply_term_rules",
    "TermsServiceError",
    "InvalidArgumentError",
    "DuplicateTermError",
    "TermNotFoundError",
    "InvalidTermsStorageError",
]
