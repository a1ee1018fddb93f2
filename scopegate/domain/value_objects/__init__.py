"""Domain value objects (immutable, self-validating)."""

from scopegate.domain.value_objects.scope import ScopeRef

__all__ = ["ScopeRef"]
