"""
HTTP collaborators used by the Tester worker.

Every request carries an explicit timeout. Any transport error, bad status
or unreadable body from the inspection service becomes a CheckerException.
"""

import json
import logging

import httpx

from changeguard.domain.exceptions import CheckerException
from changeguard.domain.interfaces import (
    EndpointProberInterface,
    LayoutInspectorInterface,
)
from changeguard.domain.models import BoundingBox, LayoutMeasurement, ProbeResponse

logger = logging.getLogger("changeguard.collaborators.http")


def _box(data: dict) -> BoundingBox:
    return BoundingBox(
        left=float(data["left"]),
        top=float(data["top"]),
        right=float(data["right"]),
        bottom=float(data["bottom"]),
    )


class HttpLayoutInspector(LayoutInspectorInterface):
    """
    Client for a rendering/inspection service.

    POSTs {"surface", "subject", "reference"} and expects
    {"subject": box, "reference": box} where box has left/top/right/bottom.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Args:
            url: Inspection endpoint
            timeout: Seconds per request
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._url = url
        self._timeout = timeout
        self._transport = transport

    def measure(self, surface: str, subject: str, reference: str) -> LayoutMeasurement:
        payload = {"surface": surface, "subject": subject, "reference": reference}
        logger.debug("Inspecting %s: %s vs %s", surface, subject, reference)
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(self._url, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise CheckerException(f"inspection of {surface} failed: {e}") from e
        except json.JSONDecodeError as e:
            raise CheckerException(f"inspection service returned invalid JSON: {e}") from e

        try:
            return LayoutMeasurement(
                subject=_box(data["subject"]),
                reference=_box(data["reference"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CheckerException(f"inspection result is incomplete: {e!r}") from e


class HttpEndpointProber(EndpointProberInterface):
    """Issues one GET against the application under test."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport

    def probe(self, endpoint: str) -> ProbeResponse:
        """
        Any status is a valid probe result; only transport errors raise.

        Raises:
            CheckerException: If the call cannot be completed
        """
        try:
            with httpx.Client(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = client.get(endpoint)
        except httpx.HTTPError as e:
            raise CheckerException(f"probe of {endpoint} failed: {e}") from e

        try:
            response.json()
            parsed = True
        except ValueError:
            parsed = False
        logger.debug("Probe %s -> %d (parsed=%s)", endpoint, response.status_code, parsed)
        return ProbeResponse(
            status_code=response.status_code,
            body=response.text,
            parsed=parsed,
        )
