from .term import Term

__all__ = ["Term"]
