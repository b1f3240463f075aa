"""Pytest configuration and shared fixtures."""

from typing import Any
from unittest.mock import Mock

import pytest

from servicecall.aws.parsers import parse_json_error, parse_json_response
from servicecall.client.client import ServiceClient
from servicecall.client.pipeline import ExecutionPipeline
from servicecall.config.settings import Settings
from servicecall.models.operation import ServiceModel
from tests.fakes import AsyncScriptedTransport, ScriptedTransport, serialize


@pytest.fixture
def model_data() -> dict[str, Any]:
    """Provide a botocore-style model exercising pagination and waiters."""
    return {
        "metadata": {
            "serviceFullName": "Example Service",
            "endpointPrefix": "example",
            "targetPrefix": "Example_20240101",
            "jsonVersion": "1.1",
        },
        "operations": {
            "ListTables": {"http": {"method": "POST", "requestUri": "/"}},
            "ListObjects": {},
            "ListJobs": {},
            "ListStreams": {},
            "DescribeTable": {"input": {"required": ["TableName"]}},
        },
        "pagination": {
            "ListTables": {
                "input_token": "ExclusiveStartTableName",
                "output_token": "LastEvaluatedTableName",
                "result_key": "TableNames",
                "limit_key": "Limit",
            },
            "ListObjects": {
                "input_token": "Marker",
                "output_token": "NextMarker",
                "more_results": "IsTruncated",
                "result_key": "Contents",
            },
            "ListJobs": {"input_token": "NextToken", "output_token": "NextToken"},
        },
        "waiters": {
            "TableExists": {
                "operation": "DescribeTable",
                "delay": 5,
                "maxAttempts": 3,
                "acceptors": [
                    {
                        "state": "success",
                        "matcher": "path",
                        "argument": "Table.TableStatus",
                        "expected": "ACTIVE",
                    },
                    {
                        "state": "failure",
                        "matcher": "path",
                        "argument": "Table.TableStatus",
                        "expected": "FAILED",
                    },
                    {
                        "state": "retry",
                        "matcher": "error",
                        "expected": "ResourceNotFoundException",
                    },
                ],
            },
            "TableReachable": {
                "operation": "DescribeTable",
                "delay": 2,
                "maxAttempts": 5,
                "acceptors": [{"state": "success", "matcher": "status", "expected": 200}],
            },
        },
    }


@pytest.fixture
def service_model(model_data: dict[str, Any]) -> ServiceModel:
    """Provide the resolved example service model."""
    return ServiceModel.from_dict(model_data)


@pytest.fixture
def settings() -> Settings:
    """Provide settings isolated from the environment."""
    return Settings(_env_file=None, region="us-east-1")


@pytest.fixture
def transport() -> ScriptedTransport:
    """Provide a blocking scripted transport."""
    return ScriptedTransport()


@pytest.fixture
def async_transport() -> AsyncScriptedTransport:
    """Provide a scripted transport that supports non-blocking sends."""
    return AsyncScriptedTransport()


@pytest.fixture
def signer() -> Mock:
    """Provide a signer that signs in place."""
    return Mock(return_value=None)


@pytest.fixture
def credentials_provider() -> Mock:
    """Provide a credentials provider returning dummy credentials."""
    return Mock(return_value=("AKIDEXAMPLE", "secret"))


def _build_pipeline(transport: Any, signer: Mock, credentials_provider: Mock) -> ExecutionPipeline:
    return ExecutionPipeline(
        serializer=serialize,
        signer=signer,
        transport=transport,
        credentials_provider=credentials_provider,
        error_parser=parse_json_error,
        response_parser=parse_json_response,
        client_name="ExampleClient",
    )


@pytest.fixture
def pipeline(
    transport: ScriptedTransport, signer: Mock, credentials_provider: Mock
) -> ExecutionPipeline:
    """Provide a pipeline over the blocking scripted transport."""
    return _build_pipeline(transport, signer, credentials_provider)


@pytest.fixture
def async_pipeline(
    async_transport: AsyncScriptedTransport, signer: Mock, credentials_provider: Mock
) -> ExecutionPipeline:
    """Provide a pipeline over the non-blocking scripted transport."""
    return _build_pipeline(async_transport, signer, credentials_provider)


@pytest.fixture
def client(
    service_model: ServiceModel, pipeline: ExecutionPipeline, settings: Settings
) -> ServiceClient:
    """Provide a client over the blocking scripted transport."""
    return ServiceClient(service_model, pipeline, settings=settings)


@pytest.fixture
def async_client(
    service_model: ServiceModel, async_pipeline: ExecutionPipeline, settings: Settings
) -> ServiceClient:
    """Provide a client over the non-blocking scripted transport."""
    return ServiceClient(service_model, async_pipeline, settings=settings)
