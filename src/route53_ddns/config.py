"""Deployment configuration loading and validation."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

ZONE_ID_PATTERN = re.compile(r"^[A-Z0-9]+$")
ALPHA_NUM_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")
ROLE_PATTERN = re.compile(r"^[-_a-zA-Z0-9]+$")
REGION_PATTERN = re.compile(r"^[a-z]+-[a-z]+-[1-9]$")
LAMBDA_NAME_PATTERN = re.compile(r"^[-_a-zA-Z0-9]{1,140}$")
HOSTNAME_PATTERN = re.compile(r"^[a-z][-a-z0-9]*$")
DOMAIN_PATTERN = re.compile(r"^([a-z][-a-z0-9]*)([.]([a-z][-a-z0-9]*))+$")
USERNAME_PATTERN = re.compile(r"^[@.a-zA-Z0-9]+$")
SECRET_PATTERN = re.compile(r"^[-+/_a-zA-Z0-9]{30,}$")
CIDR_PATTERN = re.compile(
    r"^(1?[0-9]{1,2}|2[0-5][0-9])[.](1?[0-9]{1,2}|2[0-5][0-9])[.]"
    r"(1?[0-9]{1,2}|2[0-5][0-9])[.](1?[0-9]{1,2}|2[0-5][0-9])(/([12]?[0-9]|3[012]))?$"
)

# CloudWatch Logs only accepts these retention periods
LOG_RETENTION_DAYS = (
    1, 3, 5, 7, 14, 30, 60, 90, 120, 150, 180, 365, 400, 545,
    731, 1096, 1827, 2192, 2557, 2922, 3288, 3653,
)  # fmt: skip

DEFAULT_CONFIG_FILE = "config.json"


def _default_region() -> str:
    return os.environ.get("AWS_REGION", "").strip() or "us-east-1"


def _snake_case(key: str) -> str:
    """Convert camelCase config keys (``iamRoleName``) to snake_case."""
    key = re.sub(r"IP(?=[A-Z]|$)", "Ip", key)
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _check(name: str, value: str | None, pattern: re.Pattern[str]) -> None:
    if value is not None and not pattern.match(value):
        raise ValidationError(name, value, f"must match {pattern.pattern}")


def _check_type(name: str, annotation: str, value: Any) -> Any:
    """Check a field against its annotation, returning the value to store."""
    base = annotation.removesuffix(" | None")
    if value is None:
        if base != annotation:
            return None
        raise ValidationError(name, value, "is required")
    if base == "bool":
        if not isinstance(value, bool):
            raise ValidationError(name, value, "must be true or false")
    elif base == "int":
        # bool is a subclass of int
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(name, value, "must be an integer")
    elif base == "str":
        if not isinstance(value, str):
            raise ValidationError(name, value, "must be a string")
    elif base.startswith("tuple"):
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            raise ValidationError(name, value, "must be a list of strings")
        return tuple(value)
    return value


@dataclass(frozen=True)
class DeployConfig:
    """
    Desired-state inputs for a deployment.

    Built from a JSON or YAML file with :meth:`load`. Keys may be written in
    camelCase (``iamRoleName``) or snake_case (``iam_role_name``).
    Validation runs on construction.
    """

    client_secret: str
    allowed_hostnames: tuple[str, ...] = ()
    allowed_ip_masks: tuple[str, ...] = ()
    change_comment_template: str | None = None
    client_username: str | None = None
    domain_name: str | None = None
    hostname_override: str | None = None
    hostname_param: str | None = "hostname"
    iam_role_name: str = "route53-dynamic-dns-lambda"
    ip_must_match_remote_addr: bool = True
    ip_param: str = "ip"
    lambda_name: str = "route53DynamicDNS"
    region: str = field(default_factory=_default_region)
    remove_if_no_ip: bool = False
    remove_if_remote_addr_ip_mismatch: bool = False
    route53_zone_id: str | None = None
    secret_param: str = "secret"
    ttl_seconds: int = 900
    use_remote_addr_when_no_ip: bool = False
    username_param: str | None = None
    code_path: str = "handler"
    handler: str = "index.handler"
    runtime: str = "python3.12"
    timeout: int = 5
    log_retention_days: int | None = None

    def __post_init__(self) -> None:
        for f in fields(self):
            value = _check_type(f.name, str(f.type), getattr(self, f.name))
            object.__setattr__(self, f.name, value)

        if self.domain_name is None and self.route53_zone_id is None:
            raise ValidationError(
                "domain_name", None, "either domain_name or route53_zone_id must be configured"
            )
        if self.domain_name is not None:
            # Route53 reports zone names with a trailing dot
            object.__setattr__(self, "domain_name", self.domain_name.rstrip("."))

        _check("client_secret", self.client_secret, SECRET_PATTERN)
        _check("client_username", self.client_username, USERNAME_PATTERN)
        _check("domain_name", self.domain_name, DOMAIN_PATTERN)
        _check("hostname_override", self.hostname_override, HOSTNAME_PATTERN)
        _check("hostname_param", self.hostname_param, ALPHA_NUM_PATTERN)
        _check("iam_role_name", self.iam_role_name, ROLE_PATTERN)
        _check("ip_param", self.ip_param, ALPHA_NUM_PATTERN)
        _check("lambda_name", self.lambda_name, LAMBDA_NAME_PATTERN)
        _check("region", self.region, REGION_PATTERN)
        _check("route53_zone_id", self.route53_zone_id, ZONE_ID_PATTERN)
        _check("secret_param", self.secret_param, ALPHA_NUM_PATTERN)
        _check("username_param", self.username_param, ALPHA_NUM_PATTERN)
        for hostname in self.allowed_hostnames:
            _check("allowed_hostnames", hostname, HOSTNAME_PATTERN)
        for mask in self.allowed_ip_masks:
            _check("allowed_ip_masks", mask, CIDR_PATTERN)

        if self.ttl_seconds < 1:
            raise ValidationError("ttl_seconds", self.ttl_seconds, "must be at least 1")
        if not 1 <= self.timeout <= 900:
            raise ValidationError("timeout", self.timeout, "must be between 1 and 900")
        retention = self.log_retention_days
        if retention is not None and retention not in LOG_RETENTION_DAYS:
            raise ValidationError(
                "log_retention_days", retention, "must be a CloudWatch Logs retention period"
            )
        if self.hostname_override is None and self.hostname_param is None:
            raise ValidationError(
                "hostname_param", None, "required unless hostname_override is set"
            )

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DeployConfig:
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in d.items():
            if key.startswith("$"):
                # "$schema" and similar editor hints
                continue
            name = _snake_case(key)
            if name not in known:
                logger.warning("Ignoring unknown configuration key: %s", key)
                continue
            kwargs[name] = value

        if "client_secret" not in kwargs:
            raise ValidationError("client_secret", None, "is required")
        for name in ("allowed_hostnames", "allowed_ip_masks"):
            # null means "use the default"
            if kwargs.get(name, ()) is None:
                del kwargs[name]
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> DeployConfig:
        try:
            data = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            raise ValidationError("config", None, f"not valid JSON or YAML: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError("config", data, "must be a mapping")
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: str | Path = DEFAULT_CONFIG_FILE) -> DeployConfig:
        """Load a JSON or YAML config file (JSON is valid YAML)."""
        return cls.from_yaml(Path(path).read_text(encoding="utf-8"))

    def policy_name(self, domain_name: str) -> str:
        """Name of the IAM policy that lets the function update the zone."""
        return f"{self.iam_role_name}-update-{domain_name.replace('.', '-')}"

    def lambda_env(self, domain_name: str, zone_id: str, code_hash: str) -> dict[str, str]:
        """Environment variables the webhook function runs with."""
        return {
            "ALLOWED_HOSTNAMES": ";".join(self.allowed_hostnames),
            "ALLOWED_IP_MASKS": ";".join(self.allowed_ip_masks),
            "CHANGE_COMMENT_TEMPLATE": self.change_comment_template or "",
            "CLIENT_SECRET": self.client_secret,
            "CLIENT_USERNAME": self.client_username or "",
            "CODE_SHA256": code_hash,
            "DOMAIN_NAME": domain_name,
            "HOSTNAME_OVERRIDE": self.hostname_override or "",
            "HOSTNAME_PARAM": self.hostname_param or "",
            "IP_MUST_MATCH_REMOTE_ADDR": _flag(self.ip_must_match_remote_addr),
            "IP_PARAM": self.ip_param,
            "REMOVE_IF_NO_IP": _flag(self.remove_if_no_ip),
            "REMOVE_IF_REMOTE_ADDR_IP_MISMATCH": _flag(self.remove_if_remote_addr_ip_mismatch),
            "ROUTE53_ZONE_ID": zone_id,
            "SECRET_PARAM": self.secret_param,
            "TTL_SECONDS": str(self.ttl_seconds),
            "USE_REMOTE_ADDR_WHEN_NO_IP": _flag(self.use_remote_addr_when_no_ip),
            "USERNAME_PARAM": self.username_param or "",
        }


def _flag(value: bool) -> str:
    return "true" if value else "false"
