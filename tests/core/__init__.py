"""Tests for formflow.core."""
