"""設定管理モジュール"""

from slackollama.config.loader import (
    ConfigError,
    ConfigValidationError,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
)
from slackollama.config.models import (
    Config,
    HealthConfig,
    LLMConfig,
    LoggingConfig,
    ResponseConfig,
    SlackConfig,
    StoreConfig,
    ThreadConfig,
    WatchdogConfig,
)

__all__ = [
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "EnvironmentVariableError",
    "HealthConfig",
    "LLMConfig",
    "LoggingConfig",
    "ResponseConfig",
    "SlackConfig",
    "StoreConfig",
    "ThreadConfig",
    "WatchdogConfig",
    "expand_env_vars",
    "load_config",
]
