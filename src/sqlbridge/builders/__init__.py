"""
Portable SQL builders.
"""

from .base import (
    Having,
    Join,
    ParameterContainer,
    Predicate,
    SqlBuilder,
    SqlExpression,
    SqlFunction,
    SqlLiteral,
    Where,
)
from .delete import Delete
from .factory import BuilderFactory
from .insert import Insert
from .select import ORDER_ASC, ORDER_DESC, Select
from .update import Update

__all__ = [
    "BuilderFactory",
    "Delete",
    "Having",
    "Insert",
    "Join",
    "ORDER_ASC",
    "ORDER_DESC",
    "ParameterContainer",
    "Predicate",
    "Select",
    "SqlBuilder",
    "SqlExpression",
    "SqlFunction",
    "SqlLiteral",
    "Update",
    "Where",
]
