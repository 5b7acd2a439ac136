"""Test support helpers importable from worker processes."""
