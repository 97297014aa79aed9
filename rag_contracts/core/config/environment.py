"""
Build environment — where synthesis runs, read from the process environment.

    CDK_CLI_VERSION       required
    CDK_DEFAULT_REGION    required
    CDK_DEFAULT_ACCOUNT   account id; when unset, the account field of
    CODEBUILD_BUILD_ARN   (arn:aws:codebuild:{region}:{account}:build/...)

Anything missing is a fatal configuration error, never a silent default.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict

from rag_contracts.core.errors import MissingConfigurationError

logger = logging.getLogger(__name__)

ENV_CLI_VERSION = "CDK_CLI_VERSION"
ENV_REGION = "CDK_DEFAULT_REGION"
ENV_ACCOUNT = "CDK_DEFAULT_ACCOUNT"
ENV_CODEBUILD_ARN = "CODEBUILD_BUILD_ARN"


class BuildEnvironment(BaseModel):
    """The account/region the contracts are being synthesized in."""

    model_config = ConfigDict(frozen=True)

    cli_version: str
    account: str
    region: str

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BuildEnvironment:
        """Read the build environment.

        Raises:
            MissingConfigurationError: If any required value is absent.
        """
        env = os.environ if environ is None else environ

        cli_version = env.get(ENV_CLI_VERSION)
        if not cli_version:
            raise MissingConfigurationError(f"{ENV_CLI_VERSION} environment variable is required!")

        region = env.get(ENV_REGION, "")
        account = env.get(ENV_ACCOUNT, "")
        if not account:
            arn = env.get(ENV_CODEBUILD_ARN)
            logger.info("%s undefined, trying CodeBuild: %s", ENV_ACCOUNT, arn)
            if not arn:
                raise MissingConfigurationError(
                    f"{ENV_CODEBUILD_ARN} undefined, unable to initialize "
                    "without account information."
                )
            account = _account_from_arn(arn)

        if not region or not account:
            raise MissingConfigurationError(f"buildRegion>{region}; buildAccount>{account}")

        return cls(cli_version=cli_version, account=account, region=region)


def _account_from_arn(arn: str) -> str:
    parts = arn.split(":")
    if len(parts) < 5 or not parts[4]:
        raise MissingConfigurationError(f"Cannot read an account id from ARN '{arn}'")
    return parts[4]
