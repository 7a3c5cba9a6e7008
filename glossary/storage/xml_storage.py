""" Terms storage backed by a single XML file. """
import logging
import os
import tempfile
import xml.etree.ElementTree as ET
from typing import Iterable, List, Optional

from glossary.models.term import Term
from .base_storage import TermsService, apply_term_rules, wrap_storage_error
from .exceptions import (
    DuplicateTermError,
    InvalidArgumentError,
    InvalidTermsStorageError,
    TermNotFoundError,
)


logger = logging.getLogger(__name__)

# Element and attribute names of the storage file:
# <Terms><Term Name="..." Definition="..."/></Terms>
TERMS_ELEMENT = "Terms"
TERM_ELEMENT = "Term"
NAME_ATTRIBUTE = "Name"
DEFINITION_ATTRIBUTE = "Definition"


def term_to_element(term: Term) -> ET.Element:
    """ Build a <Term> element, omitting Definition when it is empty. """
    element = ET.Element(TERM_ELEMENT, {NAME_ATTRIBUTE: term.name})
    if term.definition:
        element.set(DEFINITION_ATTRIBUTE, term.definition)
    return element


def element_to_term(element: ET.Element) -> Term:
    return Term(element.get(NAME_ATTRIBUTE), element.get(DEFINITION_ATTRIBUTE, ""))


class XmlTermsService(TermsService):
    """
    Provides access to glossary terms stored in an XML file.

    Each call parses the file currently on disk, applies its change in memory
    and writes the whole document back through a temporary file, so a failed
    write never leaves a half-written storage behind.
    """

    def load_terms(self) -> List[Term]:
        try:
            root = self._load_storage()
            terms = [
                apply_term_rules(element_to_term(element), "term")
                for element in root.findall(TERM_ELEMENT)
            ]
        except ValueError as ex:
            raise wrap_storage_error(ex, InvalidTermsStorageError.to_load(self.path))

        logger.debug(f"Loaded {len(terms)} terms from {self.path}")
        return terms

    def add_term(self, term: Term) -> Term:
        apply_term_rules(term, "term")

        root = self._load_storage()

        # An existing term must be changed with update_term instead.
        if self._find(root, term.name) is not None:
            raise DuplicateTermError(term.name)

        root.append(term_to_element(term))
        self._save_storage(root)

        logger.info(f"Added term '{term.name}' to {self.path}")
        return term

    def update_term(self, old_term: Term, new_term: Term) -> Term:
        apply_term_rules(old_term, "old_term")
        apply_term_rules(new_term, "new_term")

        root = self._load_storage()

        element = self._find(root, old_term.name)
        if element is None:
            raise TermNotFoundError(
                old_term.name,
                f"Unable to update term '{old_term.name}' because it doesn't exist."
            )

        if old_term.name != new_term.name and self._find(root, new_term.name) is not None:
            raise DuplicateTermError(
                new_term.name,
                f"Unable to rename term to '{new_term.name}' because it already exists."
            )

        element.set(NAME_ATTRIBUTE, new_term.name)
        if new_term.definition:
            element.set(DEFINITION_ATTRIBUTE, new_term.definition)
        else:
            element.attrib.pop(DEFINITION_ATTRIBUTE, None)

        self._save_storage(root)

        logger.info(f"Updated term '{old_term.name}' in {self.path}")
        return new_term

    def remove_term(self, term: Term) -> Term:
        apply_term_rules(term, "term")

        root = self._load_storage()

        element = self._find(root, term.name)
        if element is None:
            raise TermNotFoundError(
                term.name,
                f"Unable to remove term '{term.name}' because it doesn't exist."
            )

        root.remove(element)
        self._save_storage(root)

        logger.info(f"Removed term '{term.name}' from {self.path}")
        return term

    def recreate_storage(self, terms: Iterable[Term]) -> None:
        """
        Replace the whole storage with `terms`, in the given order.
        Used to recover from a corrupted file, so every failure after the
        argument check is reported as InvalidTermsStorageError.
        """
        if terms is None:
            raise InvalidArgumentError("terms", "Argument 'terms' must not be None.")

        try:
            root = ET.Element(TERMS_ELEMENT)
            names = set()
            for term in terms:
                apply_term_rules(term, "terms")
                if term.name in names:
                    raise DuplicateTermError(term.name)
                names.add(term.name)
                root.append(term_to_element(term))

            self._save_storage(root)
        except Exception as ex:
            raise wrap_storage_error(ex, InvalidTermsStorageError.to_save(self.path))

        logger.info(f"Recreated {self.path} with {len(names)} terms")

    @staticmethod
    def _find(root: ET.Element, name: str) -> Optional[ET.Element]:
        for element in root.findall(TERM_ELEMENT):
            if element.get(NAME_ATTRIBUTE) == name:
                return element
        return None

    def _load_storage(self) -> ET.Element:
        """ Parse the storage file and check its structure. """
        try:
            root = ET.parse(self.path).getroot()
            if root.tag != TERMS_ELEMENT:
                raise ValueError(f"Unexpected root element <{root.tag}>, expected <{TERMS_ELEMENT}>")

            names = set()
            for element in root.findall(TERM_ELEMENT):
                name = element.get(NAME_ATTRIBUTE)
                if name is None:
                    raise ValueError(f"<{TERM_ELEMENT}> element without '{NAME_ATTRIBUTE}' attribute")
                apply_term_rules(element_to_term(element), "term")
                if name in names:
                    raise ValueError(f"Duplicate term '{name}'")
                names.add(name)
        except (OSError, ET.ParseError, ValueError) as ex:
            raise InvalidTermsStorageError.to_load(self.path) from ex
        return root

    def _save_storage(self, root: ET.Element):
        """ Write the document to a temporary file, then swap it in. """
        ET.indent(root)
        data = ET.tostring(root, encoding="utf-8", xml_declaration=True)

        tmp_path = None
        try:
            # ElementTree writes characters XML 1.0 forbids (e.g. \x07) without
            # complaint; such a file could never be parsed again.
            ET.fromstring(data)

            directory = os.path.dirname(os.path.abspath(self.path))
            fd, tmp_path = tempfile.mkstemp(prefix=".terms-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except (OSError, ET.ParseError) as ex:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise InvalidTermsStorageError.to_save(self.path) from ex

        logger.debug(f"Saved {len(root)} terms to {self.path}")
