"""AdmissionReview decoding and encoding around the injector."""

import base64
from typing import Optional

import orjson
from loguru import logger
from pydantic import ValidationError

from secret_injector.admission.injector import Mutate, Outcome, Reject, SecretInjector
from secret_injector.exceptions import DecodeError, EncodeError
from secret_injector.patch import encode_patch
from secret_injector.responses import (
    ADMISSION_API_VERSION,
    JSON_PATCH_TYPE,
    AdmissionResponse,
    AdmissionReview,
    Status,
)


def decode_review(body: bytes) -> AdmissionReview:
    try:
        review = AdmissionReview.model_validate_json(body)
    except ValidationError as e:
        raise DecodeError(f"could not decode admission review: {e}") from e
    if review.request is None:
        raise DecodeError("admission review does not contain a request")
    return review


def request_uid(body: bytes) -> str:
    """Best effort uid lookup for bodies that do not decode into a review."""
    try:
        payload = orjson.loads(body)
    except orjson.JSONDecodeError:
        return ""
    request = payload.get("request") if isinstance(payload, dict) else None
    uid = request.get("uid") if isinstance(request, dict) else None
    return uid if isinstance(uid, str) else ""


def build_response(uid: str, outcome: Outcome) -> AdmissionResponse:
    if isinstance(outcome, Reject):
        return AdmissionResponse(uid=uid, allowed=False, status=Status(message=outcome.message))
    if isinstance(outcome, Mutate):
        return AdmissionResponse(
            uid=uid,
            allowed=True,
            patch=base64.b64encode(encode_patch(outcome.patch)).decode("utf-8"),
            patch_type=JSON_PATCH_TYPE,
        )
    return AdmissionResponse(uid=uid, allowed=True)


def encode_review(review: AdmissionReview) -> bytes:
    try:
        return orjson.dumps(review.model_dump(by_alias=True, exclude_none=True, mode="json"))
    except (TypeError, ValueError) as e:
        raise EncodeError(f"could not encode response: {e}") from e


def handle_review(injector: SecretInjector, body: bytes) -> bytes:
    """Run one admission review through the injector and return the encoded reply.

    Decode failures are answered inside the review; only encoding failures
    escape as ``EncodeError``.
    """
    api_version: Optional[str] = None
    try:
        review = decode_review(body)
    except DecodeError as e:
        logger.error(f"Can't decode body: {e}")
        response = build_response(request_uid(body), Reject(str(e)))
    else:
        request = review.request
        api_version = review.api_version
        logger.info(
            f"AdmissionReview for Kind={request.kind}, Namespace={request.namespace} "
            f"Name={request.name} UID={request.uid} Operation={request.operation}"
        )
        response = build_response(request.uid, injector.evaluate(request.object, request.namespace))

    reply = AdmissionReview(api_version=api_version or ADMISSION_API_VERSION, response=response)
    return encode_review(reply)
