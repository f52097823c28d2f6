"""
Test suite for schemasync.

This package contains tests for all schemasync components:
- Unit tests for the model tree, documents and configuration
- Unit tests for the reconciliation engine and the column differ
- CLI tests driving the commands end to end on temporary files
"""
