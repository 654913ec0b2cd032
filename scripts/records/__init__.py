"""Bundled item kinds and the startup registry that holds them."""

from item_store.registry import TypeRegistry

from .simple import Simple, SimpleTypePolicy
from .task import Task, TaskStatus, TaskTypePolicy


def default_registry() -> TypeRegistry:
    """A frozen registry with every bundled kind."""
    registry = TypeRegistry()
    for policy in (SimpleTypePolicy(), TaskTypePolicy()):
        registry.register_kind(policy.kind, policy)
    return registry.freeze()
