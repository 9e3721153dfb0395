"""Document parsers shared by several sources."""

from .opds import parse_atom
from .sru import parse_sru

__all__ = ["parse_atom", "parse_sru"]
