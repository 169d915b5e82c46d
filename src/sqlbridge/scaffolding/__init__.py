"""
Table gateway helpers.
"""

from .row import GenericRow
from .table import Table

__all__ = ["GenericRow", "Table"]
