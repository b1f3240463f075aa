"""Signature Version 4 request signing."""

from typing import Any

from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest


class SigV4Signer:
    """Signs ``AWSRequest`` objects in place with SigV4.

    Example:
        >>> signer = SigV4Signer("dynamodb", "us-east-1")
        >>> signer(request, credentials)
    """

    def __init__(self, service_name: str, region: str) -> None:
        if not service_name:
            raise ValueError("service_name is required for signing")
        self.service_name = service_name
        self.region = region

    def __call__(self, request: AWSRequest, credentials: Any) -> AWSRequest:
        # Re-signing must not stack Authorization headers.
        for header in ("Authorization", "X-Amz-Date", "X-Amz-Security-Token"):
            if header in request.headers:
                del request.headers[header]
        SigV4Auth(credentials, self.service_name, self.region).add_auth(request)
        return request
