"""Botocore-backed collaborators for the execution pipeline.

This package provides the default serializer, signer, transport, credential
providers and parsers used by ``ServiceClient.from_settings``:
- JSON-RPC request serialization into ``AWSRequest`` objects
- SigV4 signing with credentials from the boto3 chain
- urllib3 transport with a worker pool for non-blocking sends
- JSON response and error parsing

Example:
    >>> from servicecall.aws import JsonRpcSerializer, SigV4Signer, URLLib3Transport
"""

from servicecall.aws.credentials import SessionCredentialsProvider, StaticCredentialsProvider
from servicecall.aws.parsers import parse_json_error, parse_json_response
from servicecall.aws.serializer import JsonRpcSerializer
from servicecall.aws.signer import SigV4Signer
from servicecall.aws.transport import URLLib3Transport

__all__ = [
    "JsonRpcSerializer",
    "SessionCredentialsProvider",
    "SigV4Signer",
    "StaticCredentialsProvider",
    "URLLib3Transport",
    "parse_json_error",
    "parse_json_response",
]
