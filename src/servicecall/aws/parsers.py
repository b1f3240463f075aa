"""Response and error parsers for JSON protocol services.

The error parser is best effort: a body that carries no structured error
yields whatever it can (possibly an empty mapping), never an exception.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, Final

from servicecall.constants import REQUEST_ID_HEADERS, SERVER_ERROR_STATUS
from servicecall.models.operation import OperationModel

logger: Final = logging.getLogger(__name__)


def _request_id(headers: Mapping[str, str] | None) -> str | None:
    if not headers:
        return None
    lowered = {key.lower(): value for key, value in headers.items()}
    for name in REQUEST_ID_HEADERS:
        if name.lower() in lowered:
            return lowered[name.lower()]
    return None


def _decode_body(content: bytes | None) -> Any:
    if not content:
        return {}
    return json.loads(content.decode("utf-8"))


def parse_json_response(response: Any, operation: OperationModel) -> dict[str, Any]:
    """Decode a successful JSON response into the operation's output.

    The output carries a ``ResponseMetadata`` entry with the status code,
    headers and request ID, the way botocore shapes its results.

    Args:
        response: Raw response with ``status_code``, ``headers`` and ``content``.
        operation: Operation the response belongs to.

    Returns:
        Decoded output mapping.

    Raises:
        ValueError: If the body is not a JSON object.
    """
    body = _decode_body(response.content)
    if not isinstance(body, dict):
        raise ValueError(f"{operation.name} returned a non-object JSON body")

    headers = dict(response.headers or {})
    body["ResponseMetadata"] = {
        "RequestId": _request_id(headers),
        "HTTPStatusCode": response.status_code,
        "HTTPHeaders": headers,
    }
    return body


def parse_json_error(response: Any) -> dict[str, Any]:
    """Extract ``code``, ``type``, ``message``, ``request_id`` and ``status_code``.

    Accepts either a raw response object or an already-decoded error body,
    including the ``{"Error": ..., "ResponseMetadata": ...}`` envelope that
    botocore attaches to ``ClientError``.
    Codes such as ``com.amazonaws.dynamodb#ThrottlingException`` are reduced
    to the part after ``#``.

    Args:
        response: Raw failure response, or a mapping holding the error body.

    Returns:
        Mapping with the fields that could be extracted.
    """
    status_code = getattr(response, "status_code", None)
    headers = getattr(response, "headers", None)

    if isinstance(response, Mapping):
        body: Any = response
    else:
        try:
            body = _decode_body(getattr(response, "content", None))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.debug("Error response body is not JSON")
            raw = getattr(response, "content", b"") or b""
            text = raw.decode("utf-8", errors="replace").strip()
            return {"message": text} if text else {}

    if not isinstance(body, Mapping):
        return {}

    # botocore ClientError envelope: {"Error": {...}, "ResponseMetadata": {...}}
    envelope = body.get("Error") if isinstance(body.get("Error"), Mapping) else {}
    metadata = (
        body.get("ResponseMetadata") if isinstance(body.get("ResponseMetadata"), Mapping) else {}
    )

    code = body.get("__type") or body.get("code") or body.get("Code") or envelope.get("Code")
    if not code and headers:
        code = {k.lower(): v for k, v in headers.items()}.get("x-amzn-errortype")
    if code:
        code = str(code).split("#")[-1].split(":")[0]

    if status_code is None:
        status_code = metadata.get("HTTPStatusCode")

    error_type = body.get("type") or envelope.get("Type")
    if error_type is None and status_code is not None:
        error_type = "server" if status_code >= SERVER_ERROR_STATUS else "client"
    elif error_type == "Sender":
        error_type = "client"
    elif error_type == "Receiver":
        error_type = "server"

    parsed: dict[str, Any] = {}
    if code:
        parsed["code"] = code
    if error_type:
        parsed["type"] = error_type
    message = body.get("message") or body.get("Message") or envelope.get("Message")
    if message:
        parsed["message"] = message
    request_id = _request_id(headers) or metadata.get("RequestId")
    if request_id:
        parsed["request_id"] = request_id
    if status_code is not None:
        parsed["status_code"] = status_code
    return parsed
