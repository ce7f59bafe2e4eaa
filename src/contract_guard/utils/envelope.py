"""
Response Envelope Inspection
============================
Every compliant API response is wrapped in an envelope:

    {success: true,  data: ..., meta?: ...}
    {success: false, message: ..., errors?: [...]}

The client transformation layer strips that envelope for list endpoints, so a
captured body is either an envelope, a stripped payload or a bare scalar.
classify_envelope() turns the ad-hoc field probing into a single discriminant.

Known limitation: an endpoint whose *correct* shape is a bare array is
indistinguishable from one the transformation layer already unwrapped.
"""

from typing import Any

from contract_guard.core.models import EnvelopeKind


def classify_envelope(response: Any) -> EnvelopeKind:
    if isinstance(response, list):
        return EnvelopeKind.RAW_ARRAY
    if isinstance(response, dict):
        if "success" not in response and "data" not in response:
            return EnvelopeKind.RAW_OBJECT
        if response.get("success") is False:
            return EnvelopeKind.ERROR_ENVELOPE
        return EnvelopeKind.SUCCESS_ENVELOPE
    return EnvelopeKind.SCALAR


def is_transformation_applied(response: Any) -> bool:
    """A bare array, or an object lacking both `success` and `data`, was already unwrapped."""
    return classify_envelope(response) in (EnvelopeKind.RAW_ARRAY, EnvelopeKind.RAW_OBJECT)
