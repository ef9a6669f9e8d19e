"""
Scope helpers for auth-gated routes.

Scopes follow the `{action}` / `{action}:{resource}` convention. Mutating
actions also accept the broad `write` scope.
"""

from typing import List


def _scopes(base: List[str], action: str, items) -> List[str]:
    return base + [f"{action}:{item}" for item in items]


def create_scopes(*items: str) -> List[str]:
    """Scopes accepted for creating the given resources."""
    return _scopes(["write", "create"], "create", items)


def read_scopes(*items: str) -> List[str]:
    """Scopes accepted for reading the given resources."""
    return _scopes(["read"], "read", items)


def update_scopes(*items: str) -> List[str]:
    """Scopes accepted for updating the given resources."""
    return _scopes(["write", "update"], "update", items)


def delete_scopes(*items: str) -> List[str]:
    """Scopes accepted for deleting the given resources."""
    return _scopes(["write", "delete"], "delete", items)
