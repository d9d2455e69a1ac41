"""changeguard JSON Schema definitions and validation utilities.

Schemas:
    - worker_request.schema.json: Envelope a worker reads from stdin
    - worker_response.schema.json: Envelope a worker writes to stdout
    - pipeline_config.schema.json: Pipeline configuration file

Usage:
    from changeguard.schemas import decode_request, encode_response

    request = decode_request(sys.stdin.read())  # Raises ProtocolError if invalid
"""

from __future__ import annotations

import json
from functools import cache
from importlib.resources import files
from typing import Any

import jsonschema

from changeguard.domain.exceptions import ProtocolError
from changeguard.domain.protocol import WorkerRequest, WorkerResponse


@cache
def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from the schemas package.

    Args:
        name: Schema filename (e.g., 'worker_request.schema.json')

    Returns:
        Parsed JSON schema as a dictionary
    """
    schema_text = files("changeguard.schemas").joinpath(name).read_text()
    result: dict[str, Any] = json.loads(schema_text)
    return result


def get_worker_request_schema() -> dict[str, Any]:
    return _load_schema("worker_request.schema.json")


def get_worker_response_schema() -> dict[str, Any]:
    return _load_schema("worker_response.schema.json")


def get_pipeline_config_schema() -> dict[str, Any]:
    return _load_schema("pipeline_config.schema.json")


def validate_worker_request(data: dict[str, Any]) -> None:
    """Validate a request envelope against the schema.

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_worker_request_schema())


def validate_worker_response(data: dict[str, Any]) -> None:
    """Validate a response envelope against the schema.

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_worker_response_schema())


def validate_pipeline_config(data: dict[str, Any]) -> None:
    """Validate a pipeline configuration against the schema.

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_pipeline_config_schema())


# =============================================================================
# ENVELOPE CODEC
# =============================================================================


def _decode(text: str, kind: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"{kind} envelope is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ProtocolError(f"{kind} envelope must be a JSON object")
    return data


def encode_request(request: WorkerRequest) -> str:
    data = request.to_dict()
    validate_worker_request(data)
    return json.dumps(data)


def decode_request(text: str) -> WorkerRequest:
    """Parse and validate a request envelope.

    Raises:
        ProtocolError: On invalid JSON or a schema violation
    """
    data = _decode(text, "Request")
    try:
        validate_worker_request(data)
    except jsonschema.ValidationError as e:
        raise ProtocolError(f"Request envelope violates schema: {e.message}") from e
    return WorkerRequest.from_dict(data)


def encode_response(response: WorkerResponse) -> str:
    data = response.to_dict()
    validate_worker_response(data)
    return json.dumps(data)


def decode_response(text: str) -> WorkerResponse:
    """Parse and validate a response envelope.

    Raises:
        ProtocolError: On invalid JSON or a schema violation
    """
    data = _decode(text, "Response")
    try:
        validate_worker_response(data)
    except jsonschema.ValidationError as e:
        raise ProtocolError(f"Response envelope violates schema: {e.message}") from e
    return WorkerResponse.from_dict(data)


__all__ = [
    "decode_request",
    "decode_response",
    "encode_request",
    "encode_response",
    "get_pipeline_config_schema",
    "get_worker_request_schema",
    "get_worker_response_schema",
    "validate_pipeline_config",
    "validate_worker_request",
    "validate_worker_response",
]
