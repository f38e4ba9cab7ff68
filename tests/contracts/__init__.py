"""Tests for formflow.contracts."""
