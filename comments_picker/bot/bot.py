from aiogram import Bot, Dispatcher
from aiogram.enums import ParseMode
from aiogram.client.default import DefaultBotProperties
from aiogram.types import BotCommand
import logging
import traceback
import asyncio

from comments_picker.config import Settings
from comments_picker.services import GiveawayService, SelectionEngine

BOT_COMMANDS = [
    BotCommand(command="start", description="How to use the giveaway bot"),
    BotCommand(command="approve", description="Approve this group (bot owner only)"),
    BotCommand(command="pickwinner", description="Reply to a forwarded giveaway post to draw winners"),
    BotCommand(command="winnerlist", description="Show the winner history of this group"),
]


async def setup_bot(settings: Settings, service: GiveawayService,
                    selection: SelectionEngine) -> tuple[Bot, Dispatcher]:
    """
    Настройка и инициализация бота и диспетчера.

    Настройки и сервисы кладутся в данные диспетчера и приходят
    в обработчики именованными аргументами.

    Returns:
        tuple[Bot, Dispatcher]: Настроенные экземпляры бота и диспетчера
    """
    try:
        logging.info("Создание экземпляра бота...")
        bot = Bot(
            token=settings.bot_token,
            default=DefaultBotProperties(parse_mode=ParseMode.HTML, link_preview_is_disabled=True),
        )

        logging.info("Создание диспетчера...")
        dp = Dispatcher(settings=settings, service=service, selection=selection)

        logging.info("Регистрация обработчиков...")
        from .handlers import register_all_handlers
        register_all_handlers(dp)

        logging.info("Бот настроен и готов к запуску")

        return bot, dp
    except Exception as e:
        logging.error(f"Ошибка при настройке бота: {e}")
        logging.error(traceback.format_exc())
        raise


async def setup_bot_commands(bot: Bot) -> None:
    """Публикует меню команд; ошибка не мешает запуску"""
    try:
        await bot.set_my_commands(BOT_COMMANDS)
    except Exception as e:
        logging.warning(f"Не удалось установить меню команд: {e}")


async def start_polling(bot: Bot, dp: Dispatcher, shutdown_event=None) -> None:
    """
    Запуск бота в режиме long polling.

    Args:
        bot (Bot): Экземпляр бота
        dp (Dispatcher): Экземпляр диспетчера
        shutdown_event (asyncio.Event, optional): Событие для сигнализации остановки бота
    """
    try:
        logging.info("Запуск бота в режиме long polling")
        # Вебхук и поллинг взаимоисключающие, старые обновления пропускаем
        await bot.delete_webhook(drop_pending_updates=True)

        polling = dp.start_polling(
            bot,
            allowed_updates=dp.resolve_used_update_types(),
            handle_signals=False,
        )
        if shutdown_event is None:
            await polling
            return

        polling_task = asyncio.create_task(polling, name="bot_polling_task")
        shutdown_task = asyncio.create_task(shutdown_event.wait(), name="shutdown_wait_task")

        done, pending = await asyncio.wait(
            [polling_task, shutdown_task],
            return_when=asyncio.FIRST_COMPLETED
        )

        if polling_task in done:
            shutdown_task.cancel()
            logging.info(f"Поллинг завершился: {polling_task.result()}")
        else:
            logging.info("Получен сигнал завершения работы, останавливаем поллинг")
            await dp.stop_polling()
            try:
                await polling_task
            except asyncio.CancelledError:
                pass
            logging.info("Поллинг остановлен")
    except Exception as e:
        logging.error(f"Ошибка при запуске поллинга: {e}")
        logging.error(traceback.format_exc())
        raise


async def setup_webhook(bot: Bot, dp: Dispatcher, settings: Settings) -> None:
    """
    Настройка вебхука для бота.

    Args:
        bot (Bot): Экземпляр бота
        dp (Dispatcher): Экземпляр диспетчера
        settings (Settings): Настройки с адресом и секретом вебхука
    """
    webhook_url = settings.webhook_url
    webhook_info = await bot.get_webhook_info()

    # Секрет Telegram не возвращает, поэтому с секретом вебхук ставится всегда
    if webhook_info.url != webhook_url or settings.webhook_secret:
        if webhook_info.url:
            await bot.delete_webhook()

        await bot.set_webhook(
            url=webhook_url,
            allowed_updates=dp.resolve_used_update_types(),
            secret_token=settings.webhook_secret,
        )
        logging.info(f"Вебхук настроен на URL: {webhook_url}")
    else:
        logging.info(f"Вебхук уже настроен на URL: {webhook_url}")
