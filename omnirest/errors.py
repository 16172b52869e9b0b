from __future__ import annotations
from typing import Iterable, Optional


class OmniRestError(Exception):
    """
    Base class for every error raised by the entity engine.

    `code` is a stable machine-readable string the gateway maps to an
    HTTP status, e.g. "UNKNOWN_ENTITY" -> 404.
    """

    code = "OMNIREST_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Validation errors (raised before any network call)
# ---------------------------------------------------------------------------

class UnknownEntityError(OmniRestError, KeyError):
    code = "UNKNOWN_ENTITY"

    def __init__(self, entity_name: str, catalog: str = "") -> None:
        where = f" in catalog '{catalog}'" if catalog else ""
        super().__init__(f"Unknown entity '{entity_name}'{where}.")
        self.entity_name = entity_name
        self.catalog = catalog


class UnknownConnectorError(OmniRestError, KeyError):
    code = "UNKNOWN_CONNECTOR"

    def __init__(self, connector_id: str) -> None:
        super().__init__(f"Unknown connector '{connector_id}'.")
        self.connector_id = connector_id


class MissingFilterError(OmniRestError, ValueError):
    """All absent-or-blank required filters, reported together."""

    code = "MISSING_FILTER"

    def __init__(self, entity_name: str, missing: Iterable[str]) -> None:
        self.entity_name = entity_name
        self.missing = list(missing)
        super().__init__(
            f"Entity '{entity_name}' requires parameter(s): {', '.join(self.missing)}."
        )


class MissingPathParameterError(OmniRestError, ValueError):
    code = "MISSING_PATH_PARAMETER"

    def __init__(self, parameter: str, template: str = "") -> None:
        self.parameter = parameter
        self.template = template
        super().__init__(
            f"Missing required '{parameter}' filter for endpoint '{template}'."
        )


class ReadOnlyEntityError(OmniRestError, ValueError):
    code = "READ_ONLY_ENTITY"

    def __init__(self, entity_name: str) -> None:
        super().__init__(f"Entity '{entity_name}' does not support writes.")
        self.entity_name = entity_name


# ---------------------------------------------------------------------------
# Response / transport errors (raised after dispatch)
# ---------------------------------------------------------------------------

class MalformedResponseError(OmniRestError):
    code = "MALFORMED_RESPONSE"

    def __init__(self, reason: str, body_preview: str = "") -> None:
        self.reason = reason
        self.body_preview = body_preview
        super().__init__(f"Response body is not valid JSON: {reason}")


class TransportError(OmniRestError):
    """Network failure or retry budget exhausted inside the transport."""

    code = "SOURCE_TIMEOUT"

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class WriteError(OmniRestError):
    """A create/update/delete came back non-2xx. Never swallowed."""

    code = "WRITE_FAILED"

    def __init__(self, entity_name: str, method: str, status: int, body: str) -> None:
        self.entity_name = entity_name
        self.method = method
        self.status = status
        self.body = body
        super().__init__(
            f"{method} for entity '{entity_name}' failed with HTTP {status}: {body[:200]}"
        )
