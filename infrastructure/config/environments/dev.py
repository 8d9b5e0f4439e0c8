"""Development environment configuration."""

import os

from infrastructure.config.types import EnvironmentConfig

dev_config: EnvironmentConfig = {
    "account_id": os.environ.get("CDK_DEFAULT_ACCOUNT"),
    "region": "eu-west-2",
    "lambda_memory": 2048,
    "lambda_timeout": 60,
    "lambda_ephemeral_storage_mb": 1024,
    "reserved_concurrency": 0,
    "log_retention_days": 14,
    "enable_xray_tracing": True,
    "auto_delete_objects": True,
    "removal_policy": "destroy",
    # Queue consumption (SQS -> Lambda event source mapping)
    "sqs_batch_size": 1,
    "sqs_max_batching_window_seconds": 5,
    "visibility_timeout_multiplier": 6,
    "max_receive_count": 3,
    # Render target and auth handshake
    "allowed_domains": ["localhost", "farming-grants-agreements-ui.dev.cdp-int.defra.cloud"],
    "jwt_secret_name": "dev/agreements-pdf/jwt-secret",
    "auth_token_ttl_seconds": 300,
    "navigation_timeout_ms": 30000,
    # Retention tiers (years added to the agreement span before tiering)
    "retention": {
        "short_term_prefix": "agreements_10",
        "medium_term_prefix": "agreements_15",
        "long_term_prefix": "agreements_20",
        "base_years": 7,
        "short_term_max_years": 10,
        "medium_term_max_years": 15,
    },
    "tags": {
        "Environment": "dev",
        "Project": "AgreementsPdf",
        "Owner": "FarmingGrants",
    },
}
