"""JSON-RPC request serializer.

Builds ``AWSRequest`` objects for services that speak the JSON protocol:
the operation is named by the target header and the parameters are the
JSON body. Only the presence of required top-level members is validated.
"""

import json
import logging
from typing import Final

from botocore.awsrequest import AWSRequest

from servicecall.constants import JSON_CONTENT_TYPE_PREFIX, TARGET_HEADER
from servicecall.models.command import Command
from servicecall.models.operation import ServiceMetadata

logger: Final = logging.getLogger(__name__)


class JsonRpcSerializer:
    """Serializes commands into JSON-RPC requests.

    Example:
        >>> endpoint = "https://dynamodb.us-east-1.amazonaws.com"
        >>> serializer = JsonRpcSerializer(model.metadata, endpoint)
        >>> request = serializer(command)
        >>> request.headers["X-Amz-Target"]
        'DynamoDB_20120810.ListTables'
    """

    def __init__(self, metadata: ServiceMetadata, endpoint: str) -> None:
        self.metadata = metadata
        self.endpoint = endpoint.rstrip("/")

    def __call__(self, command: Command) -> AWSRequest:
        """Build the request for ``command``.

        Raises:
            ValueError: If required parameters are missing.
        """
        operation = command.model
        missing = [
            name for name in operation.required_parameters if name not in command.parameters
        ]
        if missing:
            raise ValueError(
                f"Missing required parameter(s) in {command.operation_name}: {', '.join(missing)}"
            )

        headers = {
            "Content-Type": f"{JSON_CONTENT_TYPE_PREFIX}{self.metadata.json_version}",
        }
        if self.metadata.target_prefix:
            headers[TARGET_HEADER] = f"{self.metadata.target_prefix}.{command.operation_name}"

        body = json.dumps(command.parameters, default=str).encode("utf-8")
        logger.debug(f"Serialized {command.operation_name}: {len(body)} bytes")
        return AWSRequest(
            method=operation.http_method,
            url=f"{self.endpoint}{operation.request_uri}",
            data=body,
            headers=headers,
        )
