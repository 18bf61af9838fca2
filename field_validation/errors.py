"""
Error types for field-validation.

Three disjoint kinds of failure leave the engine:

- ConfigurationError (and subclasses): the rule set itself is broken or
  missing. Callers should treat these as server-side defects.
- ValidationFailed: the record broke one or more declared constraints.
  Carries every Violation found in the pass.
- Field-access problems never leave the engine as exceptions; they are
  reported as an ordinary Violation on the affected field.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple


@dataclass(frozen=True)
class Violation:
    """A single constraint failure on one field."""

    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


class ValidationFailed(Exception):
    """Raised when a record breaks one or more constraints."""

    def __init__(self, violations: Iterable[Violation]):
        self.violations: Tuple[Violation, ...] = tuple(violations)
        super().__init__(
            f"Validation failed with {len(self.violations)} violation(s)"
        )

    def to_list(self) -> List[Dict[str, str]]:
        """Serialize violations for a client-facing error payload."""
        return [v.to_dict() for v in self.violations]


class ConfigurationError(Exception):
    """Base class for missing or broken rule configuration."""


class ConfigNotFound(ConfigurationError):
    """No rule document is registered for a record type."""

    def __init__(self, record_type: str):
        self.record_type = record_type
        super().__init__(
            f"Validation configuration not found for record type: {record_type}"
        )


class DefinitionNotFound(ConfigurationError):
    """A $ref points at a key missing from the definitions collection."""

    def __init__(self, ref: str, key: str):
        self.ref = ref
        self.key = key
        super().__init__(f"Validation definition not found for $ref: {ref}")


class CircularReference(ConfigurationError):
    """A chain of $ref pointers loops back on itself."""

    def __init__(self, chain: Iterable[str]):
        self.chain = list(chain)
        super().__init__(
            "Circular $ref chain in definitions: " + " -> ".join(self.chain)
        )


class RuleDocumentError(ConfigurationError):
    """A rule document could not be read or has the wrong shape."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Invalid rule document {source}: {message}")
