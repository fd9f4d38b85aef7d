from dataclasses import replace
from unittest.mock import AsyncMock

from comments_picker.bot.bot import BOT_COMMANDS, setup_bot, setup_bot_commands, setup_webhook


async def test_setup_bot_wires_services_routers_and_webhook(settings, service, selection):
    # Роутеры модульные и подключаются к диспетчеру один раз за процесс
    settings = replace(settings, webhook_host="https://bot.example.com", webhook_secret="s3cret")
    bot, dp = await setup_bot(settings, service, selection)
    try:
        assert dp["settings"] is settings
        assert dp["service"] is service
        assert dp["selection"] is selection

        names = [router.name for router in dp.sub_routers]
        assert names[-1] == "entries"
        assert names.index("giveaway") < names.index("entries")

        used = set(dp.resolve_used_update_types())
        assert {"message", "channel_post", "edited_channel_post", "callback_query"} <= used
    finally:
        await bot.session.close()

    api = AsyncMock()
    api.get_webhook_info.return_value.url = ""
    await setup_webhook(api, dp, settings)

    kwargs = api.set_webhook.await_args.kwargs
    assert kwargs["url"] == "https://bot.example.com/telegram/comments_picker_webhook"
    assert kwargs["secret_token"] == "s3cret"
    api.delete_webhook.assert_not_awaited()


async def test_setup_bot_commands_tolerates_errors():
    bot = AsyncMock()
    bot.set_my_commands.side_effect = RuntimeError("offline")

    await setup_bot_commands(bot)
    bot.set_my_commands.assert_awaited_once_with(BOT_COMMANDS)
