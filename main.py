import asyncio
import logging
import sys
import argparse
import signal
import functools
from dataclasses import replace

from comments_picker.config import load_settings, setup_logging
from comments_picker.bot.bot import setup_bot, setup_bot_commands, setup_webhook, start_polling
from comments_picker.webapp.app import setup_webapp, start_webapp
from comments_picker.database.db import create_engine, create_session_factory, init_db
from comments_picker.services import GiveawayService, SelectionEngine

shutdown_event = asyncio.Event()


def handle_shutdown_signal(sig):
    """Обработчик сигналов для корректного завершения работы приложения."""
    logging.info(f"Получен сигнал завершения: {sig}")
    shutdown_event.set()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Запуск Comments Picker Bot")
    parser.add_argument("--webhook-host", help="Публичный https адрес для вебхука (переопределяет WEBHOOK_HOST)")
    return parser.parse_args(argv)


async def main():
    """Точка входа в приложение."""
    args = parse_args()

    settings = load_settings()
    if args.webhook_host:
        settings = replace(settings, webhook_host=args.webhook_host)

    setup_logging(settings)
    logging.info("Запуск Comments Picker Bot")

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, functools.partial(handle_shutdown_signal, sig))
        except NotImplementedError:
            # Windows
            logging.info(f"Обработчик сигнала {sig} не зарегистрирован - не поддерживается платформой")

    engine = create_engine(settings.database_url, echo=settings.debug)
    bot = None
    try:
        await init_db(engine)
        session_factory = create_session_factory(engine)

        service = GiveawayService(session_factory)
        selection = SelectionEngine(session_factory)

        logging.info("Настройка бота...")
        bot, dp = await setup_bot(settings, service, selection)
        await setup_bot_commands(bot)

        app = setup_webapp(bot, dp, settings)

        if settings.use_webhook:
            logging.info(f"Режим вебхука: {settings.webhook_url}")
            await setup_webhook(bot, dp, settings)
            await start_webapp(app, settings, shutdown_event=shutdown_event)
        else:
            # Веб-сервер нужен хостингу для проверки живости
            logging.info("Режим long polling")
            webapp_task = asyncio.create_task(
                start_webapp(app, settings, shutdown_event=shutdown_event),
                name="webapp_task"
            )
            webapp_task.add_done_callback(
                lambda t: logging.error(f"Задача веб-приложения завершилась с ошибкой: {t.exception()}")
                if not t.cancelled() and t.exception() else None
            )
            await start_polling(bot, dp, shutdown_event=shutdown_event)
            shutdown_event.set()
            await webapp_task
    except Exception as e:
        logging.error(f"Ошибка при запуске: {e}", exc_info=True)
        raise
    finally:
        await shutdown(bot, engine)


async def shutdown(bot, engine):
    """Корректное завершение работы приложения."""
    logging.info("Завершение работы приложения...")
    shutdown_event.set()

    if bot is not None:
        try:
            await bot.session.close()
        except Exception as e:
            logging.error(f"Ошибка при закрытии сессии бота: {e}")

    await engine.dispose()
    logging.info("Приложение остановлено")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logging.info("Принудительное завершение работы")
    except Exception as e:
        logging.error(f"Необработанное исключение: {e}")
        sys.exit(1)
