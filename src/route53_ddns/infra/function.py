"""The webhook Lambda function and its public URL."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..config import DeployConfig
from ..diff import changed_keys, deep_equals
from .aws import AwsClients, ResourceContext, not_found
from .base import AwsResource, ResourceKind, ResourceRegistry
from .hosted_zone import HostedZone
from .lambda_builder import CodePackage
from .role import Role

logger = logging.getLogger(__name__)

CODE_HASH_KEY = "CODE_SHA256"
SECRET_KEYS = frozenset({"CLIENT_SECRET"})


def _display(key: str, value: str | None) -> str:
    if value is None:
        return "(none)"
    if key in SECRET_KEYS:
        return "********"
    return repr(value)


class Function(AwsResource):
    """
    The Lambda function serving the dynamic DNS webhook.

    Planning compares the desired environment (which embeds the code hash)
    and runtime settings against the deployed function, so code and
    configuration updates are only made when something actually changed.

    Runtime attributes set by plan/apply:
        arn: Function ARN, None until the function exists
        url: Function URL, None until the URL config exists
    """

    kind = ResourceKind.FUNCTION
    depends_on = frozenset({ResourceKind.HOSTED_ZONE, ResourceKind.ROLE, ResourceKind.LOG_GROUP})
    service = "lambda"

    def __init__(
        self,
        context: ResourceContext,
        registry: ResourceRegistry,
        clients: AwsClients,
        function_name: str,
        env: Mapping[str, str],
        package: CodePackage,
        handler: str = "index.handler",
        runtime: str = "python3.12",
        timeout: int = 5,
    ) -> None:
        super().__init__(context, registry, clients)
        self.function_name = function_name
        self.env = dict(env)
        self.package = package
        self.handler = handler
        self.runtime = runtime
        self.timeout = timeout
        self.arn: str | None = None
        self.url: str | None = None
        self.existing_env: dict[str, str] | None = None
        self.existing_settings: dict[str, Any] | None = None
        self.code_changes = True
        self.config_changes = True

    @property
    def needs_apply(self) -> bool:
        return self.arn is None or self.code_changes or self.config_changes or self.url is None

    @property
    def settings(self) -> dict[str, Any]:
        """Desired function settings other than the environment."""
        return {
            "Handler": self.handler,
            "Role": self.sibling(Role).arn,
            "Runtime": self.runtime,
            "Timeout": self.timeout,
        }

    async def _plan(self) -> None:
        client = await self.client()
        response = await not_found(
            client.get_function(FunctionName=self.function_name),
            "ResourceNotFoundException",
        )
        configuration = (response or {}).get("Configuration")
        if configuration is None:
            logger.info("Will deploy Lambda Function %s with configuration:", self.function_name)
            for key, value in self.env.items():
                logger.info("  %s: %s", key, _display(key, value))
            return

        self.arn = configuration["FunctionArn"]
        logger.info("Lambda Function exists: %s %s", self.function_name, self.arn)
        self.existing_env = configuration.get("Environment", {}).get("Variables", {})
        self.existing_settings = {key: configuration.get(key) for key in self.settings}

        different = changed_keys(self.env, self.existing_env)
        settings_differ = not deep_equals(self.existing_settings, self.settings)
        if different or settings_differ:
            logger.info("Configuration change:")
            for key, expected, actual in different:
                logger.info("  %s: %s => %s", key, _display(key, actual), _display(key, expected))
            if settings_differ:
                logger.info("  settings: %s => %s", self.existing_settings, self.settings)
            self.config_changes = True
            self.code_changes = any(key == CODE_HASH_KEY for key, _, _ in different)
        else:
            logger.info("No Lambda configuration changes.")
            self.config_changes = False
            self.code_changes = False

        url_config = await not_found(
            client.get_function_url_config(FunctionName=self.function_name),
            "ResourceNotFoundException",
        )
        if url_config is not None:
            self.url = url_config.get("FunctionUrl")

    async def _apply(self) -> None:
        client = await self.client()
        domain_name = self.sibling(HostedZone).require_domain_name()
        role_arn = self.require(self.sibling(Role).arn, "role ARN")

        if self.arn is None:
            logger.info("Creating Lambda Function: %s", self.function_name)
            response = await client.create_function(
                FunctionName=self.function_name,
                Description=f"Route53 dynamic DNS update handler for {domain_name}",
                Code={"ZipFile": self.package.zip_bytes},
                Environment={"Variables": self.env},
                Handler=self.handler,
                PackageType="Zip",
                Publish=True,
                Role=role_arn,
                Runtime=self.runtime,
                Timeout=self.timeout,
            )
            self.arn = response.get("FunctionArn")
            await client.get_waiter("function_active_v2").wait(FunctionName=self.function_name)
            logger.info("Created Lambda Function: %s %s", self.function_name, self.arn)
        else:
            if self.code_changes:
                logger.info("Updating Lambda Function code: %s", self.function_name)
                response = await client.update_function_code(
                    FunctionName=self.function_name,
                    ZipFile=self.package.zip_bytes,
                    Publish=True,
                )
                # The configuration cannot change while a code update is in progress
                await client.get_waiter("function_updated_v2").wait(
                    FunctionName=self.function_name
                )
                logger.info(
                    "Updated Lambda code: %s %s",
                    response.get("FunctionName"),
                    response.get("CodeSha256"),
                )
            if self.config_changes:
                logger.info("Updating Lambda Function configuration: %s", self.function_name)
                await client.update_function_configuration(
                    FunctionName=self.function_name,
                    Description=f"Route53 dynamic DNS update handler for {domain_name}",
                    Environment={"Variables": self.env},
                    Handler=self.handler,
                    Role=role_arn,
                    Runtime=self.runtime,
                    Timeout=self.timeout,
                )
                await client.get_waiter("function_updated_v2").wait(
                    FunctionName=self.function_name
                )
                logger.info("Updated Lambda config: %s", self.function_name)

        if self.url is None:
            response = await client.create_function_url_config(
                FunctionName=self.function_name,
                AuthType="NONE",
                InvokeMode="BUFFERED",
            )
            self.url = response.get("FunctionUrl")
            logger.info("Created Function URL: %s", self.url)

        self.existing_env = dict(self.env)
        self.code_changes = False
        self.config_changes = False

    def format_url(self, config: DeployConfig) -> str:
        """Render the webhook URL with placeholders for the client to fill in."""
        url = self.require(self.url, "function URL")
        params = [f"{config.ip_param}=__IP__", f"{config.secret_param}=__SECRET__"]
        if config.username_param is not None:
            params.append(f"{config.username_param}=__USERNAME__")
        if config.hostname_override is None:
            params.append(f"{config.hostname_param}=__HOSTNAME__")
        return url + "?" + "&".join(params)
