import random
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiogram.filters import CommandObject
from aiogram.types import Chat, MessageOriginChannel, User

from comments_picker.bot import texts
from comments_picker.bot.filters.giveaway import ForwardedChannelPostFilter, MentionTagFilter
from comments_picker.bot.handlers.admin import approve_command
from comments_picker.bot.handlers.entries import collect_entry
from comments_picker.bot.handlers.giveaway import detect_giveaway_post, pick_winner_command
from comments_picker.bot.handlers.winners import winner_list_command, winner_list_page_callback
from comments_picker.bot.keyboards.callback_data import WinnerListCallback
from comments_picker.services import PostRef, Rejection, SelectionEngine

from .conftest import CHANNEL_ID, GROUP_ID, MENTION_TAG, OWNER_ID, submission

NOW = datetime(2026, 10, 18, tzinfo=timezone.utc)
ADMIN_ID = 500


def make_message(chat_type="supergroup", user_id=ADMIN_ID, text="/cmd", reply_post_id=None, chat_id=GROUP_ID):
    message = MagicMock()
    message.chat = Chat(id=chat_id, type=chat_type)
    message.from_user = User(id=user_id, is_bot=False, first_name="Ann", username="ann")
    message.sender_chat = None
    message.message_id = 321
    message.text = text
    message.caption = None
    message.answer = AsyncMock()
    message.reply_to_message = None
    if reply_post_id is not None:
        message.reply_to_message = SimpleNamespace(
            message_id=55,
            forward_origin=MessageOriginChannel(
                date=NOW, chat=Chat(id=CHANNEL_ID, type="channel"), message_id=reply_post_id
            ),
        )
    return message


def answered_text(message):
    return message.answer.await_args.args[0]


def make_bot(admins=(ADMIN_ID,)):
    bot = AsyncMock()
    bot.get_chat_administrators.return_value = [SimpleNamespace(user=SimpleNamespace(id=a)) for a in admins]
    bot.send_message.return_value = SimpleNamespace(message_id=900)
    bot.get_chat.return_value = SimpleNamespace(linked_chat_id=GROUP_ID)
    return bot


def command(name, args=None):
    return CommandObject(prefix="/", command=name, args=args)


# /approve

async def test_approve_outside_group(settings, service):
    message = make_message(chat_type="private", user_id=OWNER_ID)
    await approve_command(message, settings, service)

    assert answered_text(message) == texts.rejection(Rejection.WRONG_CHAT)


async def test_approve_by_non_owner(settings, service):
    message = make_message(user_id=ADMIN_ID)
    await approve_command(message, settings, service)

    assert answered_text(message) == texts.rejection(Rejection.NOT_OWNER)
    assert not await service.is_approved(GROUP_ID)


async def test_approve_by_owner(settings, service):
    message = make_message(user_id=OWNER_ID)
    await approve_command(message, settings, service)

    assert answered_text(message) == texts.approved(MENTION_TAG)
    assert await service.is_approved(GROUP_ID)


# Обнаружение постов и прием заявок

async def test_channel_post_detection(settings, service):
    post = make_message(chat_type="channel", chat_id=CHANNEL_ID, text=f"Win a prize {MENTION_TAG}")
    post.message_id = 7

    assert await MentionTagFilter()(post, settings)
    await detect_giveaway_post(post, make_bot(), settings, service)

    stored = await service.find_pickable(CHANNEL_ID, 7)
    assert stored.discussion_group_id == GROUP_ID


async def test_mention_filter_rejects_untagged_post(settings):
    post = make_message(chat_type="channel", text="just news")
    assert not await MentionTagFilter()(post, settings)


async def test_comment_becomes_entry(service, open_post):
    message = make_message(user_id=42, text="  count me in  ", reply_post_id=open_post.post_id)
    match = await ForwardedChannelPostFilter()(message)

    await collect_entry(message, match["post_ref"], service)

    [entry] = await service.list_entries(GROUP_ID, CHANNEL_ID, open_post.post_id)
    assert (entry.user_id, entry.username, entry.comment) == (42, "ann", "count me in")


async def test_non_text_comment_is_recorded(service, open_post):
    message = make_message(user_id=43, text=None, reply_post_id=open_post.post_id)
    await collect_entry(message, open_post, service)

    [entry] = await service.list_entries(GROUP_ID, CHANNEL_ID, open_post.post_id)
    assert entry.comment == "[non-text]"


async def test_comment_on_behalf_of_chat_is_ignored(service, open_post):
    message = make_message(user_id=44, reply_post_id=open_post.post_id)
    message.sender_chat = Chat(id=CHANNEL_ID, type="channel")
    await collect_entry(message, open_post, service)

    assert await service.list_entries(GROUP_ID, CHANNEL_ID, open_post.post_id) == []


async def test_plain_message_is_not_a_comment():
    assert await ForwardedChannelPostFilter()(make_message()) is False


# /pickwinner

@pytest.fixture
def fast_selection(session_factory):
    return SelectionEngine(session_factory, rng=random.Random(3), tick_interval=0.001)


async def test_pickwinner_requires_approval(settings, service, fast_selection):
    message = make_message(reply_post_id=7)
    await pick_winner_command(message, command("pickwinner"), make_bot(), settings, service, fast_selection)

    assert answered_text(message) == texts.rejection(Rejection.NOT_APPROVED)


async def test_pickwinner_requires_admin(settings, service, fast_selection, open_post):
    message = make_message(user_id=ADMIN_ID + 1, reply_post_id=open_post.post_id)
    await pick_winner_command(message, command("pickwinner"), make_bot(), settings, service, fast_selection)

    assert answered_text(message) == texts.rejection(Rejection.NOT_ADMIN)


async def test_pickwinner_requires_reply(settings, service, fast_selection, open_post):
    message = make_message()
    await pick_winner_command(message, command("pickwinner", "2"), make_bot(), settings, service, fast_selection)

    assert answered_text(message) == texts.rejection(Rejection.NOT_A_REPLY)


async def test_pickwinner_without_entries(settings, service, fast_selection, open_post):
    message = make_message(reply_post_id=open_post.post_id)
    await pick_winner_command(message, command("pickwinner"), make_bot(), settings, service, fast_selection)

    assert answered_text(message) == texts.rejection(Rejection.NO_ENTRIES)


async def test_pickwinner_runs_live_draw(settings, service, fast_selection, open_post):
    for user_id in (1, 2, 3):
        await service.submit_entry(submission(open_post, user_id, username=f"user{user_id}"))

    bot = make_bot()
    message = make_message(reply_post_id=open_post.post_id)
    await pick_winner_command(message, command("pickwinner", "2 please"), bot, settings, service, fast_selection)

    message.answer.assert_not_awaited()
    assert bot.send_message.await_args_list[0].kwargs["reply_parameters"].message_id == 55
    final_text = bot.edit_message_text.await_args.kwargs["text"]
    assert "RESULT" in final_text
    assert (await service.history_page(GROUP_ID, 1)).total_count == 2
    assert await service.find_pickable(CHANNEL_ID, open_post.post_id) is None


# /winnerlist

async def test_winnerlist_in_unapproved_group(settings, service):
    message = make_message()
    await winner_list_command(message, command("winnerlist"), settings, service)

    assert answered_text(message) == texts.rejection(Rejection.NOT_APPROVED)


async def test_winnerlist_empty(settings, service, open_post):
    message = make_message()
    await winner_list_command(message, command("winnerlist", "5"), settings, service)

    assert "no winner history" in answered_text(message)


def make_callback(message, page, action="page"):
    callback = MagicMock()
    callback.id = "cb"
    callback.answer = AsyncMock()
    callback.message = message
    return callback, WinnerListCallback(action=action, page=page)


async def test_winnerlist_callback_ignores_out_of_range(settings, service, open_post, monkeypatch):
    from comments_picker.bot.handlers import winners as winners_module

    monkeypatch.setattr(winners_module, "Message", MagicMock)
    message = make_message()
    message.edit_text = AsyncMock()

    callback, data = make_callback(message, page=3)
    await winner_list_page_callback(callback, data, settings, service)

    callback.answer.assert_awaited_once()
    message.edit_text.assert_not_awaited()


async def test_winnerlist_callback_edits_page(settings, service, open_post, monkeypatch):
    from comments_picker.bot.handlers import winners as winners_module

    monkeypatch.setattr(winners_module, "Message", MagicMock)
    message = make_message()
    message.edit_text = AsyncMock()

    callback, data = make_callback(message, page=1)
    await winner_list_page_callback(callback, data, settings, service)

    message.edit_text.assert_awaited_once()
    assert "no winner history" in message.edit_text.await_args.args[0]


async def test_winnerlist_noop_button(settings, service, open_post):
    message = make_message()
    message.edit_text = AsyncMock()

    callback, data = make_callback(message, page=0, action="noop")
    await winner_list_page_callback(callback, data, settings, service)

    callback.answer.assert_awaited_once()
    message.edit_text.assert_not_awaited()
