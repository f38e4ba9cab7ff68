"""Extension hooks: pluggy specs and the filter-chain bus."""

from formflow.plugins.hookspecs import hookimpl, hookspec
from formflow.plugins.manager import HookBus

__all__ = ["HookBus", "hookimpl", "hookspec"]
