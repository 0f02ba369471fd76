"""YAML設定ファイルの読み込みと環境変数展開"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from slackollama.config.models import (
    LLM_PROVIDERS,
    STORE_BACKENDS,
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


class ConfigError(Exception):
    """設定関連の基底例外"""


class ConfigValidationError(ConfigError):
    """設定値のバリデーションエラー"""


class EnvironmentVariableError(ConfigError):
    """環境変数が見つからないエラー"""


# 環境変数パターン: ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

_TRUE_VALUES = frozenset({"true", "yes", "on", "1"})
_FALSE_VALUES = frozenset({"false", "no", "off", "0"})


def expand_env_vars(value: str) -> str:
    """文字列中の ${VAR_NAME} を環境変数の値に置換する

    Args:
        value: 置換対象の文字列

    Returns:
        環境変数が展開された文字列

    Raises:
        EnvironmentVariableError: 環境変数が未設定
    """
    if not value:
        return value

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            raise EnvironmentVariableError(
                f"Environment variable '{var_name}' is not set"
            )
        return env_value

    return ENV_VAR_PATTERN.sub(replace_var, value)


def _expand_recursive(data: Any) -> Any:
    """データ構造を再帰的に走査し、文字列中の環境変数を展開する

    Args:
        data: 展開対象のデータ（dict, list, str, その他）

    Returns:
        環境変数が展開されたデータ
    """
    if isinstance(data, dict):
        return {key: _expand_recursive(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_recursive(item) for item in data]
    elif isinstance(data, str):
        return expand_env_vars(data)
    else:
        return data


def _validate_required_field(data: dict[str, Any], field: str, parent: str = "") -> Any:
    """必須フィールドの存在を検証する

    Args:
        data: 検証対象のdict
        field: フィールド名
        parent: 親フィールド名（エラーメッセージ用）

    Returns:
        フィールドの値

    Raises:
        ConfigValidationError: フィールドが存在しない
    """
    if field not in data or data[field] is None:
        full_path = f"{parent}.{field}" if parent else field
        raise ConfigValidationError(f"Required field '{full_path}' is missing")
    return data[field]


def _optional_section(data: dict[str, Any], name: str) -> dict[str, Any]:
    """任意セクションを取得する（未指定なら空dict）

    Raises:
        ConfigValidationError: セクションがマッピングでない
    """
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigValidationError(f"Section '{name}' must be a mapping")
    return section


def _to_bool(value: Any, path: str) -> bool:
    """真偽値に変換する（環境変数展開後の文字列も受け付ける）

    Raises:
        ConfigValidationError: 真偽値として解釈できない
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    raise ConfigValidationError(f"'{path}' must be a boolean, got {value!r}")


def _to_positive(value: Any, path: str, cast: type = float) -> Any:
    """正の数値に変換する

    Raises:
        ConfigValidationError: 数値でない、または0以下
    """
    try:
        number = cast(value)
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"'{path}' must be a number, got {value!r}") from e
    if number <= 0:
        raise ConfigValidationError(f"'{path}' must be positive, got {value!r}")
    return number


def _load_llm(llm_data: dict[str, Any]) -> LLMConfig:
    provider = llm_data.get("provider", "ollama")
    if provider not in LLM_PROVIDERS:
        raise ConfigValidationError(
            f"'llm.provider' must be one of {sorted(LLM_PROVIDERS)}, got {provider!r}"
        )
    return LLMConfig(
        model=_validate_required_field(llm_data, "model", "llm"),
        provider=provider,
        host=llm_data.get("host", "http://127.0.0.1:11434"),
        temperature=llm_data.get("temperature"),
        max_tokens=llm_data.get("max_tokens"),
        system_prompt=llm_data.get("system_prompt"),
        keep_alive=llm_data.get("keep_alive", -1),
        timeout_seconds=_to_positive(
            llm_data.get("timeout_seconds", 300.0), "llm.timeout_seconds"
        ),
        max_history_messages=_to_positive(
            llm_data.get("max_history_messages", 40), "llm.max_history_messages", int
        ),
    )


def _load_store(store_data: dict[str, Any]) -> StoreConfig:
    backend = store_data.get("backend", "sqlite")
    if backend not in STORE_BACKENDS:
        raise ConfigValidationError(
            f"'store.backend' must be one of {sorted(STORE_BACKENDS)}, got {backend!r}"
        )
    return StoreConfig(
        backend=backend,
        database_path=store_data.get("database_path", "./data/slackollama.db"),
        redis_host=store_data.get("redis_host", "127.0.0.1"),
        redis_port=int(store_data.get("redis_port", 6379)),
        redis_db=int(store_data.get("redis_db", 0)),
        key_prefix=store_data.get("key_prefix", "slackollama"),
        context_ttl_seconds=_to_positive(
            store_data.get("context_ttl_seconds", 60 * 60 * 24 * 7),
            "store.context_ttl_seconds",
            int,
        ),
    )


def _load_response(response_data: dict[str, Any]) -> ResponseConfig:
    max_length = _to_positive(
        response_data.get("max_message_length", 2000),
        "response.max_message_length",
        int,
    )
    marker = response_data.get("continuation_marker", "...")
    if len(marker) >= max_length:
        raise ConfigValidationError(
            "'response.continuation_marker' must be shorter than max_message_length"
        )
    return ResponseConfig(
        max_message_length=max_length,
        continuation_marker=marker,
        flush_interval_seconds=_to_positive(
            response_data.get("flush_interval_seconds", 0.3),
            "response.flush_interval_seconds",
        ),
        thread_title=response_data.get("thread_title", "Ollama Says"),
        greeting=response_data.get("greeting", "Hi!"),
    )


def _load_threads(thread_data: dict[str, Any]) -> ThreadConfig:
    return ThreadConfig(
        idle_ttl_seconds=_to_positive(
            thread_data.get("idle_ttl_seconds", 600), "threads.idle_ttl_seconds", int
        ),
        sweep_interval_seconds=_to_positive(
            thread_data.get("sweep_interval_seconds", 60),
            "threads.sweep_interval_seconds",
            int,
        ),
        idle_reaction=thread_data.get("idle_reaction", "zzz"),
    )


def _load_watchdog(watchdog_data: dict[str, Any]) -> WatchdogConfig:
    stale = watchdog_data.get("stale_threshold_seconds")
    return WatchdogConfig(
        heartbeat_interval_seconds=_to_positive(
            watchdog_data.get("heartbeat_interval_seconds", 30.0),
            "watchdog.heartbeat_interval_seconds",
        ),
        stale_threshold_seconds=(
            None
            if stale is None
            else _to_positive(stale, "watchdog.stale_threshold_seconds")
        ),
        reconnect_base_delay_seconds=_to_positive(
            watchdog_data.get("reconnect_base_delay_seconds", 2.0),
            "watchdog.reconnect_base_delay_seconds",
        ),
        reconnect_max_delay_seconds=_to_positive(
            watchdog_data.get("reconnect_max_delay_seconds", 60.0),
            "watchdog.reconnect_max_delay_seconds",
        ),
        shutdown_grace_seconds=float(watchdog_data.get("shutdown_grace_seconds", 1.0)),
        self_heal=_to_bool(watchdog_data.get("self_heal", True), "watchdog.self_heal"),
    )


def load_config(path: str | Path) -> Config:
    """設定ファイルを読み込む

    Args:
        path: config.yaml のパス

    Returns:
        Config オブジェクト

    Raises:
        FileNotFoundError: ファイルが存在しない
        ConfigValidationError: 必須項目が欠落、または値が不正
        EnvironmentVariableError: 環境変数が未設定
        yaml.YAMLError: YAML構文エラー
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f)

    if not isinstance(raw_data, dict):
        raise ConfigValidationError("Config file must contain a mapping")

    # 環境変数を展開
    data = _expand_recursive(raw_data)

    # 必須セクションの検証
    slack_data = _validate_required_field(data, "slack")
    llm_data = _validate_required_field(data, "llm")

    slack = SlackConfig(
        bot_token=_validate_required_field(slack_data, "bot_token", "slack"),
        app_token=_validate_required_field(slack_data, "app_token", "slack"),
    )

    health_data = _optional_section(data, "health")
    port = health_data.get("port")
    health = HealthConfig(port=None if port is None else int(port))

    # LoggingConfig (optional)
    logging_config: LoggingConfig | None = None
    logging_data = data.get("logging")
    if logging_data:
        logging_config = LoggingConfig(
            level=logging_data.get("level", "INFO"),
            format=logging_data.get(
                "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
            loggers=logging_data.get("loggers"),
            debug_llm_messages=_to_bool(
                logging_data.get("debug_llm_messages", False),
                "logging.debug_llm_messages",
            ),
        )

    return Config(
        slack=slack,
        llm=_load_llm(llm_data),
        store=_load_store(_optional_section(data, "store")),
        response=_load_response(_optional_section(data, "response")),
        threads=_load_threads(_optional_section(data, "threads")),
        watchdog=_load_watchdog(_optional_section(data, "watchdog")),
        health=health,
        logging=logging_config,
    )
