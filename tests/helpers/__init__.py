"""Shared fakes and form builders for tests."""
