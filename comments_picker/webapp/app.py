from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from aiogram import Bot, Dispatcher
from aiogram.types import Update
import logging
import uvicorn
import asyncio

from comments_picker.config import Settings

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def setup_webapp(bot: Bot, dp: Dispatcher, settings: Settings) -> FastAPI:
    """
    Настройка FastAPI приложения: проверка живости и прием вебхука Telegram.

    Args:
        bot (Bot): Экземпляр бота Telegram
        dp (Dispatcher): Диспетчер, которому передаются обновления
        settings (Settings): Настройки приложения

    Returns:
        FastAPI: Настроенное FastAPI приложение
    """
    app = FastAPI(
        title="Comments Picker Bot",
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.debug else None,
    )

    app.state.bot = bot
    app.state.dp = dp
    # Ссылки на задачи обработки, иначе их может собрать GC
    app.state.update_tasks = set()

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "OK"

    if not settings.use_webhook:
        # В режиме long polling обновления приходят только от Telegram через getUpdates
        logging.info("Веб-приложение настроено: только проверка живости")
        return app

    if not settings.webhook_secret:
        raise ValueError("WEBHOOK_SECRET обязателен в режиме вебхука")

    @app.post(settings.webhook_path)
    async def telegram_webhook(request: Request):
        if request.headers.get(SECRET_HEADER) != settings.webhook_secret:
            logging.warning(f"Запрос вебхука с неверным секретом от {request.client.host if request.client else '?'}")
            return Response(status_code=403)

        try:
            data = await request.json()
            update = Update.model_validate(data, context={"bot": bot})
        except Exception as e:
            logging.warning(f"Некорректное обновление в вебхуке: {e}")
            return Response(status_code=400)

        # Розыгрыш длится ~20 секунд, поэтому Telegram отвечаем сразу
        task = asyncio.create_task(dp.feed_update(bot, update), name=f"update_{update.update_id}")
        app.state.update_tasks.add(task)
        task.add_done_callback(app.state.update_tasks.discard)
        return Response(status_code=200)

    logging.info(f"Веб-приложение настроено, вебхук принимается на {settings.webhook_path}")

    return app


async def start_webapp(app: FastAPI, settings: Settings, shutdown_event=None) -> None:
    """
    Запуск веб-сервера с приложением FastAPI.

    Args:
        app (FastAPI): Экземпляр FastAPI приложения
        settings (Settings): Настройки с адресом и портом
        shutdown_event (asyncio.Event, optional): Событие для сигнализации остановки сервера
    """
    config = uvicorn.Config(
        app=app,
        host=settings.webapp_host,
        port=settings.webapp_port,
        log_level="info" if settings.debug else "warning",
        access_log=settings.debug,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
    server = uvicorn.Server(config)

    server_task = asyncio.create_task(server.serve(), name="webapp_server_task")
    logging.info(f"Веб-сервер запущен на {settings.webapp_host}:{settings.webapp_port}")

    if shutdown_event is None:
        await server_task
    else:
        shutdown_task = asyncio.create_task(shutdown_event.wait(), name="webapp_shutdown_task")
        done, pending = await asyncio.wait(
            [server_task, shutdown_task],
            return_when=asyncio.FIRST_COMPLETED
        )

        if server_task in done:
            shutdown_task.cancel()
            try:
                server_task.result()
            except Exception as e:
                logging.error(f"Веб-сервер завершился с ошибкой: {e}")
        else:
            logging.info("Получен сигнал завершения работы, останавливаем веб-сервер")
            server.should_exit = True
            try:
                await server_task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logging.error(f"Ошибка при остановке веб-сервера: {e}")

    # Дожидаемся розыгрышей, которые еще идут
    pending_updates = list(app.state.update_tasks)
    if pending_updates:
        logging.info(f"Ожидание {len(pending_updates)} необработанных обновлений...")
        await asyncio.wait(pending_updates, timeout=30)

    logging.info("Веб-сервер завершил работу")
