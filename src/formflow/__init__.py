"""
formflow: submission processing for page-based, conditionally branching forms.

Drives a submitted form through gating, page navigation, validation,
persistence and notification, and renders templated text from the
submitted data through a token substitution engine.
"""

__version__ = "0.1.0"
