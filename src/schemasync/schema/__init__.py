"""
Schema management package for schemasync.

This package provides:
- Re-introspection reconciliation of schema model trees
- Column change detection for migrations
- Default value equivalence rules
"""

from .reconciler import SchemaReconciler, RecoveryLog, reconcile
from .column_differ import ColumnChange, ColumnChanges, diff_column
from .defaults import defaults_match, json_defaults_match
from .warnings import ReconciliationWarning, WarningCategory

__all__ = [
    "SchemaReconciler",
    "RecoveryLog",
    "reconcile",
    "ColumnChange",
    "ColumnChanges",
    "diff_column",
    "defaults_match",
    "json_defaults_match",
    "ReconciliationWarning",
    "WarningCategory",
]
