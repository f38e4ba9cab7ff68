"""Tests for formflow.engine."""
