"""アプリケーションのエントリポイント"""

import asyncio
import logging
import os
import signal
import sys
from pathlib import Path

from slackollama.application.services import (
    ConnectionWatchdog,
    ContextStore,
    PeriodicTask,
    ThreadActivityTracker,
)
from slackollama.application.use_cases import ReplyToMentionUseCase
from slackollama.config import (
    Config,
    ConfigError,
    LoggingConfig,
    StoreConfig,
    load_config,
)
from slackollama.domain.repositories import KeyValueStore
from slackollama.domain.services import GenerationStream
from slackollama.infrastructure.http import HealthServer
from slackollama.infrastructure.llm import (
    JinjaPromptBuilder,
    LiteLLMGenerationStream,
    LLMClient,
    OllamaGenerationStream,
)
from slackollama.infrastructure.persistence import DatabaseManager, SQLiteKeyValueStore
from slackollama.infrastructure.redis_store import RedisKeyValueStore
from slackollama.infrastructure.slack import (
    SlackAppRunner,
    SlackChatSink,
    SlackEventAdapter,
    SlackMessageFetcher,
    SocketModeLivenessMonitor,
    create_slack_app,
)
from slackollama.presentation import register_handlers

# Default logging for early startup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def configure_logging(config: LoggingConfig | None) -> None:
    """Configure logging based on config.

    Args:
        config: Logging configuration. If None, uses defaults.
    """
    if config is None:
        return

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    if root_logger.handlers:
        formatter = logging.Formatter(config.format)
        for handler in root_logger.handlers:
            handler.setFormatter(formatter)

    if config.loggers:
        for logger_name, logger_level in config.loggers.items():
            logging.getLogger(logger_name).setLevel(
                getattr(logging, logger_level.upper(), logging.INFO)
            )
            logger.debug(
                "Set logger '%s' to level %s", logger_name, logger_level.upper()
            )


def terminate(code: int) -> None:
    """ログを書き出してプロセスを即座に終了する

    イベントループの中から呼ばれるため sys.exit ではなく os._exit を使う。
    """
    logging.shutdown()
    os._exit(code)


async def build_store(config: StoreConfig) -> KeyValueStore:
    """設定に応じた KeyValueStore を生成する"""
    if config.backend == "redis":
        logger.info(
            "Using Redis store at %s:%d/%d",
            config.redis_host,
            config.redis_port,
            config.redis_db,
        )
        return RedisKeyValueStore.from_config(config)

    logger.info("Using SQLite store at %s", config.database_path)
    db_manager = DatabaseManager(config.database_path)
    await db_manager.create_tables()
    return SQLiteKeyValueStore(db_manager)


def build_generation_stream(config: Config) -> GenerationStream:
    """設定に応じた推論ストリームを生成する"""
    debug_llm_messages = bool(config.logging and config.logging.debug_llm_messages)
    if config.llm.provider == "litellm":
        return LiteLLMGenerationStream(
            LLMClient(config.llm),
            config.llm,
            debug_llm_messages=debug_llm_messages,
        )
    return OllamaGenerationStream(config.llm, debug_llm_messages=debug_llm_messages)


async def main() -> None:
    """アプリケーションを起動する"""
    config_path = Path(sys.argv[1] if len(sys.argv) > 1 else "config.yaml")
    if not config_path.exists():
        logger.error("%s not found", config_path)
        sys.exit(1)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.error("Failed to load config: %s", e)
        sys.exit(1)

    configure_logging(config.logging)

    store = await build_store(config.store)
    generation_stream = build_generation_stream(config)

    async def close_resources() -> None:
        await store.close()
        if isinstance(generation_stream, OllamaGenerationStream):
            await generation_stream.close()

    watchdog = ConnectionWatchdog(
        config.watchdog,
        terminate=terminate,
        on_shutdown=close_resources,
    )

    app = create_slack_app(config.slack)
    chat_sink = SlackChatSink(app.client, idle_reaction=config.threads.idle_reaction)
    bot_user_id = await chat_sink.get_bot_user_id()
    logger.info("Bot user ID: %s", bot_user_id)

    context_store = ContextStore(
        store,
        key_prefix=config.store.key_prefix,
        ttl_seconds=config.store.context_ttl_seconds,
    )
    thread_tracker = ThreadActivityTracker(
        store,
        chat_sink,
        key_prefix=config.store.key_prefix,
        idle_ttl_seconds=config.threads.idle_ttl_seconds,
        index_ttl_seconds=config.store.context_ttl_seconds,
    )

    reply_use_case = ReplyToMentionUseCase(
        chat_sink=chat_sink,
        message_fetcher=SlackMessageFetcher(app.client),
        generation_stream=generation_stream,
        context_store=context_store,
        thread_tracker=thread_tracker,
        liveness=watchdog,
        prompt_builder=JinjaPromptBuilder(),
        config=config.response,
        bot_user_id=bot_user_id,
    )
    register_handlers(app, reply_use_case, SlackEventAdapter(), bot_user_id)

    runner = SlackAppRunner(app, config.slack.app_token)
    monitor = SocketModeLivenessMonitor(runner, watchdog)
    runner.add_frame_listener(monitor.on_frame)

    periodic_tasks = [
        PeriodicTask(
            "connection-watchdog",
            monitor.tick,
            config.watchdog.heartbeat_interval_seconds,
        ),
        PeriodicTask(
            "idle-thread-sweep",
            thread_tracker.sweep,
            config.threads.sweep_interval_seconds,
        ),
    ]

    health_server: HealthServer | None = None
    if config.health.port is not None:
        health_server = HealthServer(watchdog, runner, store, config.health.port)
        await health_server.start()

    if isinstance(generation_stream, OllamaGenerationStream):
        logger.info("Warming up model %s...", config.llm.model)
        warm_up_task = asyncio.create_task(generation_stream.warm_up())
    else:
        warm_up_task = None

    logger.info("Starting Socket Mode handler...")
    runner_task = asyncio.create_task(runner.start())
    task_handles = [asyncio.create_task(task.start()) for task in periodic_tasks]

    # Setup signal handlers for graceful shutdown
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def shutdown_handler() -> None:
        logger.info("Received shutdown signal...")
        stop_event.set()

    loop.add_signal_handler(signal.SIGINT, shutdown_handler)
    loop.add_signal_handler(signal.SIGTERM, shutdown_handler)

    await stop_event.wait()

    # Graceful shutdown
    logger.info("Shutting down...")

    await watchdog.stop()
    for task in periodic_tasks:
        if task.is_running:
            logger.info("Stopping periodic task %s", task.name)
            await task.stop()

    closed = await runner.close(timeout=5.0)
    if not closed:
        logger.warning("Runner close timed out, cancelling tasks...")

    pending = [runner_task, *task_handles]
    if warm_up_task is not None:
        pending.append(warm_up_task)
    for task_handle in pending:
        task_handle.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

    if health_server is not None and health_server.is_running:
        await health_server.stop()

    await close_resources()

    logger.info("Shutdown complete")


def run() -> None:
    """Run the async main function."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    run()
