#!/usr/bin/env python3
"""
JSON-RPC 2.0 Server for ValidationService

Exposes record validation to any language that can spawn a process and
talk newline-delimited JSON over stdin/stdout.

Protocol: JSON-RPC 2.0 over stdin/stdout (newline-delimited JSON)
Specification: https://www.jsonrpc.org/specification

Usage:
    python -m field_validation.jsonrpc_server [--debug] [--config PATH]

Example request (stdin):
    {"jsonrpc":"2.0","id":1,"method":"validate",
     "params":{"record_type":"wireTransferRequest","record":{...}}}

Example responses (stdout):
    {"jsonrpc":"2.0","id":1,"result":{"valid":true}}
    {"jsonrpc":"2.0","id":1,"error":{"code":-32001,"message":"Validation failed",
     "data":[{"field":"amount","message":"Amount must be at least 0.01."}]}}

Violations and configuration defects use different error codes so a caller
can answer "bad request" for the first and "internal error" for the second.
"""

import sys
import json
import signal
import logging
import argparse
import traceback
from decimal import Decimal
from typing import Any, Dict, Optional

from field_validation import ValidationService
from field_validation.errors import (
    CircularReference,
    ConfigNotFound,
    ConfigurationError,
    DefinitionNotFound,
    ValidationFailed,
)


class InvalidParams(ValueError):
    """A method was called with missing or malformed parameters."""


class MethodNotFound(ValueError):
    """The requested method is not exposed by the server."""


class ValidationJsonRpcServer:
    """JSON-RPC 2.0 server wrapping ValidationService API."""

    # JSON-RPC error codes
    ERROR_PARSE = -32700        # Invalid JSON
    ERROR_INVALID_REQUEST = -32600  # Invalid JSON-RPC structure
    ERROR_METHOD_NOT_FOUND = -32601  # Unknown method
    ERROR_INVALID_PARAMS = -32602   # Invalid parameters
    ERROR_INTERNAL = -32000      # Application error (catch-all)
    ERROR_VALIDATION = -32001    # Record broke one or more rules
    ERROR_CONFIGURATION = -32002  # Missing rule document or definition

    def __init__(self, debug: bool = False, service: Optional[ValidationService] = None,
                 config_path: Optional[str] = None):
        """
        Initialize JSON-RPC server.

        Args:
            debug: Enable debug logging to stderr
            service: Existing ValidationService to wrap (built from config_path if omitted)
            config_path: YAML config for a new ValidationService
        """
        self.service = service or ValidationService(config_path=config_path)
        self.running = False
        self.debug = debug

        # Method dispatch table
        self.methods = {
            'validate': self._handle_validate,
            'record_types': self._handle_record_types,
            'reload_rules': self._handle_reload_rules,
        }

    def _log(self, message: str):
        """Log debug message to stderr (doesn't interfere with JSON-RPC on stdout)."""
        if self.debug:
            sys.stderr.write(f"[DEBUG] {message}\n")
            sys.stderr.flush()

    def start_server(self):
        """Answer one request per stdin line until EOF or stop_server()."""
        self.running = True
        self._log("server started")

        try:
            for line in sys.stdin:
                if not self.running:
                    break
                if line.strip():
                    self._send_response(self.handle_request(line))
        except KeyboardInterrupt:
            pass
        except Exception:
            traceback.print_exc(file=sys.stderr)
        finally:
            self.running = False
            self._log("server stopped")

    def stop_server(self):
        self.running = False

    def handle_request(self, request_json: str) -> Dict[str, Any]:
        """
        Parse and process a JSON-RPC request.

        Args:
            request_json: JSON-RPC request string

        Returns:
            JSON-RPC response dict (success or error)
        """
        request_id = None

        try:
            try:
                request = json.loads(request_json, parse_float=Decimal)
            except json.JSONDecodeError as e:
                return self._error_response(None, self.ERROR_PARSE,
                                            f"Parse error: {e}")

            if not isinstance(request, dict):
                return self._error_response(None, self.ERROR_INVALID_REQUEST,
                                            "Request must be a JSON object")

            if request.get("jsonrpc") != "2.0":
                return self._error_response(None, self.ERROR_INVALID_REQUEST,
                                            f"Invalid JSON-RPC version: {request.get('jsonrpc')}")

            request_id = request.get("id")
            method = request.get("method")
            params = request.get("params", {})

            if not method:
                return self._error_response(request_id, self.ERROR_INVALID_REQUEST,
                                            "Missing 'method' field")

            if not isinstance(params, dict):
                return self._error_response(request_id, self.ERROR_INVALID_PARAMS,
                                            f"Params must be an object, got {type(params).__name__}")

            self._log(f"Dispatching method: {method}")
            result = self._dispatch(method, params)

            return self._success_response(request_id, result)

        except ValidationFailed as e:
            return self._error_response(request_id, self.ERROR_VALIDATION,
                                        "Validation failed", data=e.to_list())

        except ConfigurationError as e:
            self._log(f"Configuration error: {e}")
            return self._error_response(request_id, self.ERROR_CONFIGURATION,
                                        str(e), data=self._configuration_detail(e))

        except MethodNotFound as e:
            return self._error_response(request_id, self.ERROR_METHOD_NOT_FOUND, str(e))

        except InvalidParams as e:
            return self._error_response(request_id, self.ERROR_INVALID_PARAMS, str(e))

        except Exception as e:
            # Catch any unexpected errors
            self._log(f"Error processing request: {e}")
            return self._error_response(request_id, self.ERROR_INTERNAL,
                                        f"Internal error: {e}")

    def _dispatch(self, method: str, params: Dict[str, Any]) -> Any:
        handler = self.methods.get(method)
        if handler is None:
            raise MethodNotFound(f"Method not found: {method}")
        return handler(params)

    # Method handlers - wrap ValidationService API

    def _handle_validate(self, params: Dict[str, Any]) -> Any:
        """Handle 'validate' method."""
        record = params.get('record')
        record_type = params.get('record_type')

        if not isinstance(record, dict):
            raise InvalidParams("Missing required parameter: record (must be an object)")
        if record_type is not None and not isinstance(record_type, str):
            raise InvalidParams("Parameter record_type must be a string")

        try:
            self.service.validate(record, record_type)
        except ValueError as e:
            raise InvalidParams(str(e)) from e
        return {"valid": True}

    def _handle_record_types(self, params: Dict[str, Any]) -> Any:
        """Handle 'record_types' method."""
        return self.service.record_types()

    def _handle_reload_rules(self, params: Dict[str, Any]) -> Any:
        """Handle 'reload_rules' method."""
        self.service.reload_rules()
        return {"status": "ok", "record_types": self.service.record_types()}

    def _configuration_detail(self, error: ConfigurationError) -> Dict[str, Any]:
        """Identify the missing key behind a configuration defect."""
        if isinstance(error, ConfigNotFound):
            return {"record_type": error.record_type}
        if isinstance(error, DefinitionNotFound):
            return {"ref": error.ref, "definition": error.key}
        if isinstance(error, CircularReference):
            return {"chain": error.chain}
        return {}

    # Response formatting

    def _success_response(self, request_id: Any, result: Any) -> Dict[str, Any]:
        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    def _error_response(self, request_id: Any, code: int, message: str,
                        data: Optional[Any] = None) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": code, "message": message}
        if data is not None:
            error["data"] = data
        return {"jsonrpc": "2.0", "id": request_id, "error": error}

    def _send_response(self, response: Dict[str, Any]):
        """Write one response line to stdout (stderr carries the debug log)."""
        sys.stdout.write(json.dumps(response) + "\n")
        sys.stdout.flush()


def main():
    """Main entry point for JSON-RPC server."""
    parser = argparse.ArgumentParser(
        description="Record validation over JSON-RPC 2.0 (methods: validate, record_types, reload_rules)"
    )
    parser.add_argument('--debug', action='store_true',
                        help='Log to stderr at DEBUG level')
    parser.add_argument('--config', default=None,
                        help='YAML config (default: bundled local-config.yaml)')
    args = parser.parse_args()

    if args.debug:
        logging.basicConfig(stream=sys.stderr, level=logging.DEBUG)

    server = ValidationJsonRpcServer(debug=args.debug, config_path=args.config)
    signal.signal(signal.SIGTERM, lambda sig, frame: server.stop_server())
    server.start_server()


if __name__ == "__main__":
    main()
