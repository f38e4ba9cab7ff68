# src/formflow/plugins/manager.py
"""Hook bus for extension registration and filter chains.

Uses pluggy for hook specification and registration. pluggy's own call
protocol collects every implementation's return value; formflow hooks are
filters instead, so HookBus walks the registered implementations itself
and threads one value through them.
"""

from __future__ import annotations

from typing import Any

import pluggy

from formflow.contracts.errors import HookError
from formflow.contracts.results import ErrorResult, PageTransitionResult, SubmissionResult, SuccessResult
from formflow.core.logging import get_logger
from formflow.plugins.hookspecs import HOOK_SPECS, PROJECT_NAME

logger = get_logger(__name__)


class HookBus:
    """Ordered filter chains keyed by hook name.

    Usage:
        bus = HookBus()
        bus.register(MyExtension())

        count = bus.run("formflow_entry_count", 4, form=form)
        veto = bus.run_veto("formflow_pre_process", form=form)
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        for spec in HOOK_SPECS:
            self._pm.add_hookspecs(spec)

    def register(self, plugin: object, name: str | None = None) -> str | None:
        """Register an object carrying @hookimpl methods.

        Raises:
            pluggy.PluginValidationError: If an implementation does not match its
                spec or is a hook wrapper
        """
        registered = self._pm.register(plugin, name=name)
        wrappers = [
            caller.name
            for caller in self._pm.get_hookcallers(plugin) or []
            for impl in caller.get_hookimpls()
            if impl.plugin is plugin and (impl.hookwrapper or impl.wrapper)
        ]
        if wrappers:
            self._pm.unregister(plugin)
            raise pluggy.PluginValidationError(plugin, f"Hook wrappers are not supported: {wrappers}")
        logger.debug("Registered extension", plugin=registered)
        return registered

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def is_registered(self, plugin: object) -> bool:
        return self._pm.is_registered(plugin)

    def _caller(self, hook_name: str) -> pluggy.HookCaller:
        caller: pluggy.HookCaller | None = getattr(self._pm.hook, hook_name, None)
        if caller is None or caller.spec is None:
            raise HookError(hook_name)
        return caller

    @staticmethod
    def _call_order(caller: pluggy.HookCaller) -> list[pluggy.HookImpl]:
        impls = caller.get_hookimpls()
        first = [impl for impl in impls if impl.tryfirst]
        # pluggy inserts each new trylast implementation at the front
        last = [impl for impl in impls if impl.trylast][::-1]
        plain = [impl for impl in impls if not impl.tryfirst and not impl.trylast]
        return first + plain + last

    def run(self, hook_name: str, value: Any, **kwargs: Any) -> Any:
        """Thread ``value`` through every implementation of ``hook_name``.

        Implementations marked ``tryfirst`` run first and ``trylast`` last;
        within each group they run in registration order. Each receives the
        value returned by the previous one together with whichever of
        ``kwargs`` it declares.

        Raises:
            HookError: If ``hook_name`` has no spec
        """
        caller = self._caller(hook_name)
        for impl in self._call_order(caller):
            available = {"value": value, **kwargs}
            value = impl.function(*[available[arg] for arg in impl.argnames])
        return value

    def run_veto(self, hook_name: str, **kwargs: Any) -> SubmissionResult | None:
        """Run a pipeline stage hook starting from ``None``.

        Returns:
            The SubmissionResult an implementation returned, or None to proceed.

        Raises:
            TypeError: If the chain ends on something other than a
                SubmissionResult or an empty value
        """
        result = self.run(hook_name, None, **kwargs)
        if not result:
            return None
        if isinstance(result, SuccessResult | PageTransitionResult | ErrorResult):
            logger.info("Submission vetoed by extension", hook=hook_name, result_type=str(result.type))
            return result
        raise TypeError(f"Hook '{hook_name}' must return a SubmissionResult or None, got {type(result).__name__}")
