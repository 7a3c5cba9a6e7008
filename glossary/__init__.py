"""
Glossary – term/definition storage.
This module exposes the term model and the storage services that
persist a glossary to a local file.
"""

__version__ = "0.1.0"

# Expose submodules
from . import models, storage
