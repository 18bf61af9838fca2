"""
Reference Resolver - $ref expansion for rule nodes

A rule node may point into the shared definitions collection:

    "beneficiaryName": {"$ref": "#/definitions/name", "maxLength": 70}

Resolution copies the referenced base node and overlays every local property
except "$ref", so local values win on collision. A base node may itself carry
a $ref; chains are followed base-first until no reference remains, and a loop
raises CircularReference.
"""

from typing import Any, Dict, Mapping, Tuple

from .errors import CircularReference, DefinitionNotFound

REF_KEY = "$ref"
DEFINITIONS_PREFIX = "#/definitions/"


def definition_key(ref: str) -> str:
    """
    Extract the definitions key from a $ref pointer.

    Example: "#/definitions/accountNumber" -> "accountNumber"

    Pointers without the prefix are taken as the key itself.
    """
    if ref.startswith(DEFINITIONS_PREFIX):
        return ref[len(DEFINITIONS_PREFIX):]
    return ref


def resolve_ref(
    node: Mapping[str, Any],
    definitions: Mapping[str, Mapping[str, Any]],
) -> Mapping[str, Any]:
    """
    Produce the reference-free rule node for one field.

    Args:
        node: Raw rule node, possibly containing "$ref"
        definitions: Definitions collection (key -> base rule node)

    Returns:
        The node itself when it holds no "$ref", otherwise a new merged dict

    Raises:
        DefinitionNotFound: If a referenced key is absent
        CircularReference: If the reference chain loops
    """
    return _resolve(node, definitions, ())


def _resolve(
    node: Mapping[str, Any],
    definitions: Mapping[str, Mapping[str, Any]],
    chain: Tuple[str, ...],
) -> Mapping[str, Any]:
    if REF_KEY not in node:
        return node

    ref = str(node[REF_KEY])
    key = definition_key(ref)
    if key in chain:
        raise CircularReference(chain + (key,))

    base = definitions.get(key)
    if base is None:
        raise DefinitionNotFound(ref, key)

    merged: Dict[str, Any] = dict(_resolve(base, definitions, chain + (key,)))
    for name, value in node.items():
        if name != REF_KEY:
            merged[name] = value
    return merged
