"""Allow ``python -m route53_ddns``."""

from .cli import cli

cli()
