"""Translation of botocore exceptions into provider exceptions."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    PartialCredentialsError,
    ProfileNotFound,
    SSOError,
    TokenRetrievalError,
)

from ec2ssh.providers.exceptions import (
    ProviderAPIError,
    ProviderConnectionError,
    ProviderCredentialsError,
)

logger = logging.getLogger(__name__)

EXPIRED_CREDENTIAL_CODES = frozenset(
    (
        "ExpiredToken",
        "ExpiredTokenException",
        "RequestExpired",
        "UnrecognizedClientException",
        "InvalidClientTokenId",
        "AuthFailure",
    )
)


@contextmanager
def handle_aws_errors() -> Iterator[None]:
    """Re-raise botocore errors as provider exceptions.

    The original exception is kept as ``__cause__`` so callers can still
    inspect it.

    Raises
    ------
    ProviderCredentialsError
        For missing, partial, expired or SSO-related credential failures
    ProviderConnectionError
        If the endpoint cannot be reached
    ProviderAPIError
        For any other API or botocore failure
    """
    try:
        yield
    except ClientError as e:
        error = e.response.get("Error", {})
        code = error.get("Code")
        message = str(e)

        if code in EXPIRED_CREDENTIAL_CODES:
            raise ProviderCredentialsError(message, error_code=code) from e

        raise ProviderAPIError(message, error_code=code) from e
    except (
        NoCredentialsError,
        PartialCredentialsError,
        ProfileNotFound,
        SSOError,
        TokenRetrievalError,
    ) as e:
        raise ProviderCredentialsError(str(e), error_code=e.__class__.__name__) from e
    except (EndpointConnectionError, ConnectTimeoutError) as e:
        raise ProviderConnectionError(str(e), error_code=e.__class__.__name__) from e
    except BotoCoreError as e:
        logger.debug("Unhandled botocore error %s: %s", e.__class__.__name__, e)
        raise ProviderAPIError(str(e), error_code=e.__class__.__name__) from e
