"""Tests for the formflow CLI."""
