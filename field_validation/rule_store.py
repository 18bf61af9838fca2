"""Read-only holder for the definitions collection and per-record-type rule documents."""

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from .errors import ConfigNotFound


class RuleStore:
    """
    In-memory rule configuration, populated once and never mutated.

    Inputs are copied into read-only views on construction (nested dicts
    become MappingProxyType, lists become tuples), so neither the loader nor
    a caller holding a returned node can change a live store. Concurrent
    readers need no locking.
    """

    def __init__(
        self,
        definitions: Optional[Mapping[str, Dict[str, Any]]] = None,
        documents: Optional[Mapping[str, Dict[str, Any]]] = None,
    ):
        """
        Args:
            definitions: Definition key -> base rule node
            documents: Record type key -> rule document (field name -> rule node)
        """
        self._definitions = _freeze(dict(definitions or {}))
        self._documents = _freeze(dict(documents or {}))

    @property
    def definitions(self) -> Mapping[str, Dict[str, Any]]:
        """The shared definitions collection."""
        return self._definitions

    def get_rule_document(self, record_type: str) -> Mapping[str, Dict[str, Any]]:
        """
        Look up the rule document for a record type.

        Raises:
            ConfigNotFound: If no document is registered for record_type
        """
        try:
            return self._documents[record_type]
        except KeyError:
            raise ConfigNotFound(record_type) from None

    def record_types(self) -> List[str]:
        return sorted(self._documents)

    def __contains__(self, record_type: str) -> bool:
        return record_type in self._documents

    def __len__(self) -> int:
        return len(self._documents)

    def __repr__(self) -> str:
        return (
            f"RuleStore(record_types={self.record_types()}, "
            f"definitions={len(self._definitions)})"
        )


def _freeze(value: Any) -> Any:
    """Read-only copy of a parsed JSON value."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value
