"""
Rule Loader - Builds a RuleStore from JSON rule documents

Layout under the configured rules location:

    rules/
      common/validationDefinitions.json   {"definitions": {"<key>": {<rule node>}, ...}}
      specifics/<recordType>.json         {"<field>": {<rule node>}, ...}

The filename (without ".json") of each specific document is its record type
key. Local locations are scanned for every *.json file in the specifics
directory; remote (http/https) locations cannot be listed, so the record types
to fetch must be named in the config.

Each document is checked against a JSON Schema describing rule nodes before
it is accepted, so malformed rules (a non-integer minLength, an uncompilable
pattern) fail at load time rather than on the first request.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from jsonschema import Draft7Validator, FormatChecker
from jsonschema.exceptions import best_match

from .config_loader import ConfigLoader
from .errors import RuleDocumentError
from .ref_resolver import REF_KEY, definition_key
from .rule_fetcher import RuleFetcher
from .rule_store import RuleStore

logger = logging.getLogger(__name__)

_NUMERIC = {
    "anyOf": [
        {"type": "number"},
        {"type": "string", "pattern": r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*$"},
    ]
}

RULE_NODE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "$ref": {"type": "string", "minLength": 1},
        "required": {"type": "boolean"},
        "type": {"type": "string"},
        "minLength": {"type": "integer", "minimum": 0},
        "maxLength": {"type": "integer", "minimum": 0},
        "pattern": {"type": "string", "format": "regex"},
        "allowedValues": {"type": "array", "items": {"type": "string"}},
        "minValue": _NUMERIC,
        "maxValue": _NUMERIC,
        "minDate": {"type": "string"},
        "customRule": {"type": "string"},
    },
    "patternProperties": {"^errorMessage": {"type": "string"}},
}

RULE_DOCUMENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": RULE_NODE_SCHEMA,
}

DEFINITIONS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "definitions": {
            "type": "object",
            "additionalProperties": RULE_NODE_SCHEMA,
        }
    },
}


class RuleLoader:
    """Loads definitions and per-record-type rule documents into a RuleStore"""

    def __init__(self, config_loader: ConfigLoader, rule_fetcher: Optional[RuleFetcher] = None):
        """
        Initialize rule loader.

        Args:
            config_loader: ConfigLoader naming the rules location
            rule_fetcher: RuleFetcher instance (optional, built from config timeout)
        """
        self.config_loader = config_loader
        self.rule_fetcher = rule_fetcher or RuleFetcher(
            timeout=config_loader.get_request_timeout()
        )
        self.location = config_loader.get_rules_location()
        self.check_shape = config_loader.get_validate_rule_documents()

    def load(self) -> RuleStore:
        """
        Load every configured rule document.

        Returns:
            Populated RuleStore

        Raises:
            RuleDocumentError: If a document cannot be read or has the wrong shape
        """
        definitions = self.load_definitions()
        documents = self.load_documents()

        store = RuleStore(definitions, documents)
        self._warn_dangling_refs(store)
        return store

    def load_definitions(self) -> Dict[str, Dict[str, Any]]:
        """Load the shared definitions collection (empty if the file is absent)."""
        uri = self._join(self.config_loader.get_definitions_filename())

        if not self.rule_fetcher.exists(uri):
            logger.warning(
                f"Common validation definitions file not found: {uri}",
                extra={"uri": uri},
            )
            return {}

        data = self.rule_fetcher.fetch_document(uri)
        self._check(data, DEFINITIONS_SCHEMA, uri)
        definitions = data.get("definitions", {})
        logger.info(
            f"Loaded {len(definitions)} common validation definitions",
            extra={"uri": uri},
        )
        return definitions

    def load_documents(self) -> Dict[str, Dict[str, Any]]:
        """Load rule documents keyed by record type."""
        documents = {}
        for record_type, uri in self._document_uris():
            document = self.rule_fetcher.fetch_document(uri)
            self._check(document, RULE_DOCUMENT_SCHEMA, uri)
            documents[record_type] = document
            logger.info(
                f"Loaded validation config for record type: {record_type}",
                extra={"record_type": record_type, "uri": uri},
            )

        if not documents:
            logger.warning(
                f"No rule documents found under {self._join(self.config_loader.get_specifics_directory())}"
            )
        return documents

    def _document_uris(self) -> List[tuple]:
        specifics = self.config_loader.get_specifics_directory()
        record_types = self.config_loader.get_record_types()

        if self.config_loader.is_remote():
            if record_types is None:
                raise RuleDocumentError(
                    self.location,
                    "record_types must be configured for remote rule locations",
                )
            return [(rt, self._join(f"{specifics}/{rt}.json")) for rt in record_types]

        specifics_dir = Path(self.location, specifics)
        if not specifics_dir.is_dir():
            return []

        found = {p.stem: str(p) for p in sorted(specifics_dir.glob("*.json"))}
        if record_types is None:
            return list(found.items())

        for missing in [rt for rt in record_types if rt not in found]:
            logger.warning(
                f"Configured record type has no rule document: {missing}",
                extra={"record_type": missing},
            )
        return [(rt, found[rt]) for rt in record_types if rt in found]

    def _join(self, relative: str) -> str:
        if self.config_loader.is_remote():
            return self.location + relative.lstrip("/")
        return str(Path(self.location, relative))

    def _check(self, data: Any, schema: Dict[str, Any], source: str) -> None:
        if not self.check_shape:
            if not isinstance(data, dict):
                raise RuleDocumentError(source, "Top level must be a JSON object")
            return

        error = best_match(
            Draft7Validator(schema, format_checker=FormatChecker()).iter_errors(data)
        )
        if error is not None:
            error_path = " -> ".join(str(p) for p in error.path) if error.path else "root"
            raise RuleDocumentError(
                source, f"Schema validation failed at {error_path}: {error.message}"
            )

    def _warn_dangling_refs(self, store: RuleStore) -> None:
        """Log $ref targets that are missing; validation of those types will fail."""
        for record_type in store.record_types():
            for field, node in store.get_rule_document(record_type).items():
                if not isinstance(node, Mapping):
                    continue
                if REF_KEY in node and definition_key(str(node[REF_KEY])) not in store.definitions:
                    logger.warning(
                        f"Unresolvable $ref {node[REF_KEY]} on {record_type}.{field}",
                        extra={"record_type": record_type, "field": field},
                    )
