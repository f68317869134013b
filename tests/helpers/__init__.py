"""Shared helpers for the brocade test-suite."""
