"""Tests for formflow.tokens."""
