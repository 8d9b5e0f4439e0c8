"""Typed configuration contracts for environment-specific settings."""

from __future__ import annotations

from typing import Dict, List, NotRequired, Required, TypedDict


class RetentionTierConfig(TypedDict, total=False):
    """S3 key prefixes and year thresholds for agreement retention tiers."""

    short_term_prefix: str
    medium_term_prefix: str
    long_term_prefix: str
    base_years: int
    short_term_max_years: int
    medium_term_max_years: int


class EnvironmentConfig(TypedDict, total=False):
    """Strongly-typed environment configuration contract."""

    region: Required[str]
    account_id: NotRequired[str | None]

    lambda_memory: NotRequired[int]
    lambda_timeout: NotRequired[int]
    lambda_ephemeral_storage_mb: NotRequired[int]
    reserved_concurrency: NotRequired[int]
    image_asset_directory: NotRequired[str]

    sqs_batch_size: NotRequired[int]
    sqs_max_batching_window_seconds: NotRequired[int]
    visibility_timeout_multiplier: NotRequired[int]
    max_receive_count: NotRequired[int]
    queue_name: NotRequired[str]

    bucket_name: NotRequired[str]
    log_retention_days: NotRequired[int]
    auto_delete_objects: NotRequired[bool]
    removal_policy: NotRequired[str]

    allowed_domains: NotRequired[List[str]]
    jwt_secret_name: NotRequired[str]
    auth_token_ttl_seconds: NotRequired[int]
    navigation_timeout_ms: NotRequired[int]
    retention: NotRequired[RetentionTierConfig]

    enable_xray_tracing: NotRequired[bool]

    tags: NotRequired[Dict[str, str]]
