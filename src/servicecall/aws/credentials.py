"""Credential providers for request signing.

``SessionCredentialsProvider`` resolves credentials through the standard
boto3 chain (environment, shared config, SSO, instance metadata) on each
call, so refreshed credentials are picked up automatically.
"""

import logging
from typing import Final

import boto3
from botocore.credentials import Credentials, ReadOnlyCredentials
from botocore.exceptions import NoCredentialsError

logger: Final = logging.getLogger(__name__)


class SessionCredentialsProvider:
    """Resolves credentials from a boto3 session.

    Example:
        >>> provider = SessionCredentialsProvider(profile="dev")
        >>> credentials = provider()
    """

    def __init__(
        self, profile: str | None = None, session: boto3.session.Session | None = None
    ) -> None:
        """Initialize the provider.

        Args:
            profile: Named profile to use. Defaults to None (default chain).
            session: Pre-built boto3 session. Defaults to None.
        """
        self.profile = profile
        self._session = session or boto3.session.Session(profile_name=profile)
        logger.info(f"Initialized credentials provider for profile {profile or 'default'}")

    def __call__(self) -> ReadOnlyCredentials:
        """Return a frozen snapshot of the current credentials.

        Raises:
            NoCredentialsError: If the chain yields no credentials.
        """
        credentials = self._session.get_credentials()
        if credentials is None:
            raise NoCredentialsError()
        return credentials.get_frozen_credentials()


class StaticCredentialsProvider:
    """Returns fixed credentials. Useful for tests and local endpoints."""

    def __init__(self, access_key: str, secret_key: str, token: str | None = None) -> None:
        if not access_key or not secret_key:
            raise ValueError("access_key and secret_key are required")
        self._credentials = Credentials(access_key, secret_key, token)

    def __call__(self) -> Credentials:
        return self._credentials
