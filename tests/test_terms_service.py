""" Behaviour shared by every terms service backend. """
from unittest.mock import patch

import pytest

from glossary.models.term import Term
from glossary.storage import (
    DuplicateTermError,
    InvalidArgumentError,
    InvalidTermsStorageError,
    TermNotFoundError,
    TinyDBTermsService,
    XmlTermsService,
)


SAMPLE_TERMS = [
    Term("term0", "def 0"),
    Term("term1", "def 1"),
    Term("term2", "def 2"),
]

INVALID_TERMS = [None, Term(None, ""), Term("", "def"), Term("   ", "def")]

BACKENDS = {
    "xml": (XmlTermsService, "terms.xml", "glossary.storage.xml_storage.os.replace"),
    "tinydb": (TinyDBTermsService, "terms.json", "glossary.storage.tinydb_storage.os.replace"),
}


@pytest.fixture(params=sorted(BACKENDS))
def backend(request):
    return BACKENDS[request.param]


@pytest.fixture
def service(backend, tmp_path):
    """A service whose storage holds SAMPLE_TERMS."""
    service_class, file_name, _ = backend
    service = service_class(str(tmp_path / file_name))
    service.recreate_storage(SAMPLE_TERMS)
    return service


@pytest.fixture
def missing_service(backend, tmp_path):
    """A service pointing to a file that does not exist."""
    service_class, file_name, _ = backend
    return service_class(str(tmp_path / "missing" / file_name))


def test_rejects_missing_path(backend):
    service_class, _, _ = backend
    with pytest.raises(InvalidArgumentError) as exc_info:
        service_class(None)
    assert exc_info.value.argument == "path"


# --- load_terms ---

def test_load_terms(service):
    assert service.load_terms() == SAMPLE_TERMS


def test_load_terms_from_empty_storage(service):
    service.recreate_storage([])
    assert service.load_terms() == []


def test_load_terms_from_missing_file(missing_service):
    with pytest.raises(InvalidTermsStorageError) as exc_info:
        missing_service.load_terms()
    assert isinstance(exc_info.value.__cause__, OSError)


# --- add_term ---

def test_add_term(service):
    term = Term("newTerm", "newDef")

    assert service.add_term(term) == term
    assert service.load_terms() == SAMPLE_TERMS + [term]


def test_add_term_with_empty_definition(service):
    service.add_term(Term("bare", ""))

    reloaded = service.load_terms()[-1]
    assert reloaded == Term("bare", "")
    assert reloaded.definition == ""


def test_add_existing_term(service):
    with pytest.raises(DuplicateTermError) as exc_info:
        service.add_term(Term("term0", "another definition"))

    assert exc_info.value.name == "term0"
    assert "already exists" in str(exc_info.value)
    assert service.load_terms() == SAMPLE_TERMS


@pytest.mark.parametrize("term", INVALID_TERMS)
def test_add_invalid_term(missing_service, term):
    with pytest.raises(InvalidArgumentError) as exc_info:
        missing_service.add_term(term)
    assert exc_info.value.argument == "term"


def test_add_term_to_missing_file(missing_service):
    with pytest.raises(InvalidTermsStorageError):
        missing_service.add_term(Term("a", "b"))


# --- update_term ---

def test_update_term(service):
    old_term = SAMPLE_TERMS[0]
    new_term = Term("newterm0", "newdef0")

    assert service.update_term(old_term, new_term) == new_term

    terms = service.load_terms()
    assert terms == [new_term, SAMPLE_TERMS[1], SAMPLE_TERMS[2]]
    assert "term0" not in [t.name for t in terms]


def test_update_definition_only(service):
    service.update_term(SAMPLE_TERMS[1], Term("term1", "changed"))
    assert service.load_terms()[1] == Term("term1", "changed")


def test_update_term_clears_definition(service):
    service.update_term(SAMPLE_TERMS[2], Term("term2", ""))
    assert service.load_terms()[2] == Term("term2", "")


def test_update_missing_term(service):
    missing = Term("nonExistentTerm", "")

    with pytest.raises(TermNotFoundError) as exc_info:
        service.update_term(missing, missing)

    assert exc_info.value.name == "nonExistentTerm"
    assert "doesn't exist" in str(exc_info.value)
    assert service.load_terms() == SAMPLE_TERMS


def test_update_to_another_existing_term(service):
    with pytest.raises(DuplicateTermError) as exc_info:
        service.update_term(SAMPLE_TERMS[0], SAMPLE_TERMS[1])

    assert exc_info.value.name == "term1"
    assert "already exists" in str(exc_info.value)
    assert service.load_terms() == SAMPLE_TERMS


@pytest.mark.parametrize("term", INVALID_TERMS)
def test_update_invalid_old_term(missing_service, term):
    with pytest.raises(InvalidArgumentError) as exc_info:
        missing_service.update_term(term, SAMPLE_TERMS[0])
    assert exc_info.value.argument == "old_term"


@pytest.mark.parametrize("term", INVALID_TERMS)
def test_update_to_invalid_new_term(missing_service, term):
    with pytest.raises(InvalidArgumentError) as exc_info:
        missing_service.update_term(SAMPLE_TERMS[0], term)
    assert exc_info.value.argument == "new_term"


# --- remove_term ---

def test_remove_term(service):
    assert service.remove_term(SAMPLE_TERMS[0]) == SAMPLE_TERMS[0]
    assert service.load_terms() == SAMPLE_TERMS[1:]


def test_remove_missing_term(service):
    with pytest.raises(TermNotFoundError) as exc_info:
        service.remove_term(Term("nonExistentTerm", ""))

    assert "doesn't exist" in str(exc_info.value)
    assert service.load_terms() == SAMPLE_TERMS


@pytest.mark.parametrize("term", INVALID_TERMS)
def test_remove_invalid_term(missing_service, term):
    with pytest.raises(InvalidArgumentError) as exc_info:
        missing_service.remove_term(term)
    assert exc_info.value.argument == "term"


# --- recreate_storage ---

def test_recreate_storage_creates_new_file(backend, tmp_path):
    service_class, file_name, _ = backend
    service = service_class(str(tmp_path / file_name))

    service.recreate_storage(SAMPLE_TERMS)

    assert service.load_terms() == SAMPLE_TERMS


def test_recreate_storage_replaces_content(service):
    terms = [Term("z", ""), Term("a", "first")]

    service.recreate_storage(terms)

    assert service.load_terms() == terms


def test_recreate_storage_accepts_generators(service):
    service.recreate_storage(term for term in reversed(SAMPLE_TERMS))
    assert service.load_terms() == list(reversed(SAMPLE_TERMS))


def test_recreate_storage_with_none(service):
    with pytest.raises(InvalidArgumentError) as exc_info:
        service.recreate_storage(None)
    assert exc_info.value.argument == "terms"


@pytest.mark.parametrize("term", INVALID_TERMS)
def test_recreate_storage_with_invalid_terms(service, term):
    with pytest.raises(InvalidTermsStorageError) as exc_info:
        service.recreate_storage([SAMPLE_TERMS[0], term])

    cause = exc_info.value.__cause__
    assert isinstance(cause, InvalidArgumentError)
    assert cause.argument == "terms"
    assert service.load_terms() == SAMPLE_TERMS


def test_recreate_storage_with_duplicate_names(service):
    with pytest.raises(InvalidTermsStorageError) as exc_info:
        service.recreate_storage([Term("a", "1"), Term("a", "2")])

    assert isinstance(exc_info.value.__cause__, DuplicateTermError)
    assert service.load_terms() == SAMPLE_TERMS


def test_recreate_storage_in_missing_directory(missing_service):
    with pytest.raises(InvalidTermsStorageError) as exc_info:
        missing_service.recreate_storage(SAMPLE_TERMS)
    assert isinstance(exc_info.value.__cause__, OSError)


# --- persistence ---

def test_failed_write_keeps_previous_content(service, backend, tmp_path):
    _, _, replace_target = backend

    with patch(replace_target, side_effect=OSError("disk full")):
        with pytest.raises(InvalidTermsStorageError) as exc_info:
            service.add_term(Term("new", "def"))

    assert isinstance(exc_info.value.__cause__, OSError)
    assert service.load_terms() == SAMPLE_TERMS
    assert list(tmp_path.glob(".terms-*")) == []


def test_operations_see_external_changes(service, backend):
    """Nothing is cached between calls: a second service sees every write."""
    service_class, _, _ = backend
    other = service_class(service.path)

    other.add_term(Term("external", ""))

    assert Term("external", "") in service.load_terms()
    service.remove_term(Term("external", ""))
    assert other.load_terms() == SAMPLE_TERMS
