"""Environment settings helpers provided via Common Layer."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from agreements_pdf.errors import ConfigurationError


def _split_list(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return ()
    separator = ";" if ";" in raw else ","
    return tuple(item.strip().lower() for item in raw.split(separator) if item.strip())


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _bool_env(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not str(raw).strip():
        return default
    return str(raw).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class RetentionPolicy:
    """Retention tiers used to prefix stored agreement PDFs.

    Tiers are compared in ascending order: a total retention of
    ``base_threshold`` years or less uses ``base_prefix``, up to
    ``extended_threshold`` uses ``extended_prefix``, anything longer
    ``maximum_prefix``.
    """

    base_prefix: str = "agreements_10"
    extended_prefix: str = "agreements_15"
    maximum_prefix: str = "agreements_20"
    base_years: int = 7
    base_threshold: int = 10
    extended_threshold: int = 15

    def __post_init__(self) -> None:  # type: ignore[override]
        if self.base_years < 0:
            raise ConfigurationError("base_years must not be negative")
        if self.extended_threshold < self.base_threshold:
            raise ConfigurationError("extended_threshold must be >= base_threshold")
        for name in ("base_prefix", "extended_prefix", "maximum_prefix"):
            if not getattr(self, name):
                raise ConfigurationError(f"{name} must not be empty")


@dataclass(frozen=True)
class AgreementPdfSettings:
    environment: Optional[str]
    region: Optional[str]
    tmp_folder: str
    jwt_secret: Optional[str]
    jwt_secret_arn: Optional[str]
    auth_token_source: str
    auth_token_ttl_seconds: int
    bucket: Optional[str]
    s3_endpoint: Optional[str]
    allowed_domains: Tuple[str, ...]
    browser_sandbox: bool
    navigation_timeout_ms: int
    dead_letter_queue_url: Optional[str]
    retention: RetentionPolicy = field(default_factory=RetentionPolicy)

    @staticmethod
    def load(env: Optional[Mapping[str, str]] = None) -> "AgreementPdfSettings":
        env = os.environ if env is None else env

        retention = RetentionPolicy(
            base_prefix=env.get("FILES_S3_SHORT_TERM_PREFIX") or "agreements_10",
            extended_prefix=env.get("FILES_S3_MEDIUM_TERM_PREFIX") or "agreements_15",
            maximum_prefix=env.get("FILES_S3_LONG_TERM_PREFIX") or "agreements_20",
            base_years=_int_env(env, "RETENTION_BASE_YEARS", 7),
            base_threshold=_int_env(env, "RETENTION_SHORT_TERM_MAX_YEARS", 10),
            extended_threshold=_int_env(env, "RETENTION_MEDIUM_TERM_MAX_YEARS", 15),
        )

        ttl = _int_env(env, "AUTH_TOKEN_TTL_SECONDS", 300)
        if ttl <= 0:
            raise ConfigurationError("AUTH_TOKEN_TTL_SECONDS must be positive")

        return AgreementPdfSettings(
            environment=env.get("ENVIRONMENT"),
            region=env.get("AWS_REGION"),
            tmp_folder=env.get("PDF_TMP_FOLDER") or "/tmp/agreements-pdf",
            jwt_secret=env.get("AGREEMENTS_JWT_SECRET"),
            jwt_secret_arn=env.get("AGREEMENTS_JWT_SECRET_ARN") or None,
            auth_token_source=env.get("AUTH_TOKEN_SOURCE") or "defra",
            auth_token_ttl_seconds=ttl,
            bucket=(env.get("S3_BUCKET") or "").strip() or None,
            s3_endpoint=env.get("S3_ENDPOINT") or None,
            allowed_domains=_split_list(env.get("ALLOWED_DOMAINS")),
            browser_sandbox=_bool_env(env, "BROWSER_SANDBOX", False),
            navigation_timeout_ms=_int_env(env, "NAVIGATION_TIMEOUT_MS", 30000),
            dead_letter_queue_url=env.get("DEAD_LETTER_QUEUE_URL") or None,
            retention=retention,
        )
