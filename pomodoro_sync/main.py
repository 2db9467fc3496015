"""
Main entry point for Pomodoro Sync (headless Qt core)
"""
import signal
import sys

from PyQt6.QtCore import QCoreApplication
from loguru import logger

from pomodoro_sync.core.config import config, ensure_directories
from pomodoro_sync.Modules.Pomodoro_module import (
    PomodoroAPIClient,
    ThreadedDispatcher,
    ConnectivityMonitor,
    PomodoroSettingsProvider,
    PomodoroTimerService,
    PomodoroLocalDatabase,
    PomodoroStatsService,
    TimerClock,
)


def setup_logging() -> None:
    """Configure application logging"""
    # Remove default logger
    logger.remove()

    # Add console logger
    logger.add(
        sys.stderr,
        format=config.LOG_FORMAT,
        level=config.LOG_LEVEL,
        colorize=True,
    )

    # Add file logger
    log_file = config.LOGS_DIR / "pomodoro_sync.log"
    logger.add(
        log_file,
        format=config.LOG_FORMAT,
        level=config.LOG_LEVEL,
        rotation=config.LOG_ROTATION,
        retention=config.LOG_RETENTION,
        encoding="utf-8",
    )

    logger.info(f"Starting {config.APP_NAME} v{config.APP_VERSION}")


def build_services(app: QCoreApplication) -> PomodoroTimerService:
    """Połącz magazyn, monitor połączenia, ustawienia, timer i historię"""
    store = PomodoroAPIClient(
        config.API_BASE_URL,
        timeout=config.REQUEST_TIMEOUT,
        health_timeout=config.HEALTH_CHECK_TIMEOUT,
    )
    dispatcher = ThreadedDispatcher(parent=app)

    connectivity = ConnectivityMonitor(store, dispatcher, initially_online=not config.OFFLINE_MODE, parent=app)
    connectivity.attach_platform_signals()

    settings_provider = PomodoroSettingsProvider(store, dispatcher, connectivity, parent=app)
    if config.OFFLINE_MODE:
        settings_provider.set_offline_mode(True)

    timer = PomodoroTimerService(
        store,
        dispatcher,
        settings_provider,
        connectivity=connectivity,
        clock=TimerClock(config.TICK_INTERVAL_MS),
        auto_chain_delay_ms=config.AUTO_CHAIN_DELAY_MS,
        parent=app,
    )

    history = PomodoroLocalDatabase(str(config.local_db_path))
    timer.session_finished.connect(history.record_session)

    stats = PomodoroStatsService(store, dispatcher, parent=app)
    timer.session_changed.connect(stats.refresh_today)
    stats.today_stats_updated.connect(lambda s: logger.info(f"[POMODORO] Today: {s}"))

    timer.error_occurred.connect(lambda message: logger.error(f"[POMODORO] {message}"))
    timer.sound_requested.connect(lambda kind: logger.info(f"[POMODORO] Session finished ({kind})"))
    connectivity.offline_changed.connect(lambda offline: logger.info(f"[POMODORO] Offline: {offline}"))

    app.aboutToQuit.connect(dispatcher.shutdown)
    app.aboutToQuit.connect(store.close)

    # Ustawienia i rekonsyliacja po uruchomieniu pętli zdarzeń
    timer.scheduler(0, settings_provider.load)
    if not connectivity.is_offline:
        connectivity.refresh()
    timer.schedule_restore(config.STARTUP_RESTORE_DELAY_MS)

    return timer


def main() -> int:
    """Main application entry point"""
    try:
        # Setup
        ensure_directories()
        setup_logging()

        # Create application
        app = QCoreApplication(sys.argv)
        app.setApplicationName(config.APP_NAME)
        app.setApplicationVersion(config.APP_VERSION)

        signal.signal(signal.SIGINT, lambda *_: app.quit())

        timer = build_services(app)  # noqa: F841 - referencja żyje do końca app.exec()

        logger.info("Application started successfully")

        return app.exec()

    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
