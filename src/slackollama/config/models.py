"""設定データクラス"""

from dataclasses import dataclass

LLM_PROVIDERS = frozenset({"ollama", "litellm"})
STORE_BACKENDS = frozenset({"sqlite", "redis"})


@dataclass
class SlackConfig:
    """Slack接続設定"""

    bot_token: str
    app_token: str


@dataclass
class LLMConfig:
    """LLM設定

    provider が "ollama" の場合は Ollama の /api/generate を直接呼び出し、
    "litellm" の場合は LiteLLM の completion に渡す。
    """

    model: str
    provider: str = "ollama"
    host: str = "http://127.0.0.1:11434"
    temperature: float | None = None
    max_tokens: int | None = None
    system_prompt: str | None = None
    keep_alive: int | str = -1
    timeout_seconds: float = 300.0
    max_history_messages: int = 40


@dataclass
class StoreConfig:
    """会話コンテキストストア設定"""

    backend: str = "sqlite"
    database_path: str = "./data/slackollama.db"
    redis_host: str = "127.0.0.1"
    redis_port: int = 6379
    redis_db: int = 0
    key_prefix: str = "slackollama"
    context_ttl_seconds: int = 60 * 60 * 24 * 7


@dataclass
class ResponseConfig:
    """応答描画設定"""

    max_message_length: int = 2000
    continuation_marker: str = "..."
    flush_interval_seconds: float = 0.3
    thread_title: str = "Ollama Says"
    greeting: str = "Hi!"


@dataclass
class ThreadConfig:
    """スレッドのアイドル検出設定"""

    idle_ttl_seconds: int = 10 * 60
    sweep_interval_seconds: int = 60
    idle_reaction: str = "zzz"


@dataclass
class WatchdogConfig:
    """接続監視設定

    Attributes:
        heartbeat_interval_seconds: 監視間隔
        stale_threshold_seconds: 無通信とみなすまでの秒数（None なら監視間隔の2倍）
        reconnect_base_delay_seconds: 自己修復までの初期待ち時間
        reconnect_max_delay_seconds: 自己修復までの最大待ち時間
        shutdown_grace_seconds: プロセス終了前の猶予
        self_heal: False の場合は検出してもログ出力のみ
    """

    heartbeat_interval_seconds: float = 30.0
    stale_threshold_seconds: float | None = None
    reconnect_base_delay_seconds: float = 2.0
    reconnect_max_delay_seconds: float = 60.0
    shutdown_grace_seconds: float = 1.0
    self_heal: bool = True


@dataclass
class HealthConfig:
    """ヘルスチェックサーバー設定（port が None なら無効）"""

    port: int | None = None


@dataclass
class LoggingConfig:
    """ログ設定"""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    loggers: dict[str, str] | None = None
    debug_llm_messages: bool = False


@dataclass
class Config:
    """アプリケーション設定"""

    slack: SlackConfig
    llm: LLMConfig
    store: StoreConfig
    response: ResponseConfig
    threads: ThreadConfig
    watchdog: WatchdogConfig
    health: HealthConfig
    logging: LoggingConfig | None = None
