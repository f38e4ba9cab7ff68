"""Tests for formflow.plugins."""
