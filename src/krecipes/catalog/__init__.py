"""Catalog aggregation and content checks."""

from krecipes.catalog.checks import (
    CheckContext,
    Issue,
    get_check,
    has_failures,
    list_checks,
    register_check,
    run_checks,
)
from krecipes.catalog.index import Catalog

__all__ = [
    "Catalog",
    "CheckContext",
    "Issue",
    "get_check",
    "has_failures",
    "list_checks",
    "register_check",
    "run_checks",
]
