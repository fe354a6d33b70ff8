from __future__ import annotations

from collections.abc import Callable


def require_scopes(scopes: list[str]) -> Callable:
    """
    Decorator-style API, alternative to the YAML route rules.

    - This decorator does NOT verify anything itself.
    - It attaches metadata that the global security dependency reads
      *after* routing (during dependency resolution). Any one of the
      listed scopes is enough.
    """

    def decorator(fn: Callable) -> Callable:
        existing = set(getattr(fn, "__security_required_scopes__", set()))
        setattr(fn, "__security_required_scopes__", existing | set(scopes))
        return fn

    return decorator


def require_entitlements(entitlements: list[str]) -> Callable:
    """
    Decorator-style API. Same as ``require_scopes`` for ``x-entitlement``.
    """

    def decorator(fn: Callable) -> Callable:
        existing = set(getattr(fn, "__security_required_entitlements__", set()))
        setattr(fn, "__security_required_entitlements__", existing | set(entitlements))
        return fn

    return decorator
