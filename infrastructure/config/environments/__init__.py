from infrastructure.config.types import EnvironmentConfig

from .dev import dev_config
from .staging import staging_config
from .prod import prod_config

CONFIGS: dict[str, EnvironmentConfig] = {
    "dev": dev_config,
    "staging": staging_config,
    "prod": prod_config,
}


def get_environment_config(environment: str) -> EnvironmentConfig:
    """Get the agreement PDF deployment configuration for an environment."""
    if environment not in CONFIGS:
        raise ValueError(f"Unknown environment: {environment} (expected one of {', '.join(sorted(CONFIGS))})")
    return CONFIGS[environment]
