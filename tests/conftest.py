import random
from typing import List, Optional

import pytest

from comments_picker.config import Settings
from comments_picker.database.db import create_engine, create_session_factory, init_db
from comments_picker.services import GiveawayService, PostRef, SelectionEngine, EntrySubmission

OWNER_ID = 1000
GROUP_ID = -100200
CHANNEL_ID = -100100
MENTION_TAG = "@CommentsPickerBot"


@pytest.fixture
def settings():
    return Settings(bot_token="123456:TEST", owner_id=OWNER_ID, database_url="sqlite+aiosqlite://",
                    mention_tag=MENTION_TAG, display_timezone="Asia/Yangon")


@pytest.fixture
async def engine(tmp_path):
    # Файловая база: у :memory: своя база на каждое соединение
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'picker.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def service(session_factory):
    return GiveawayService(session_factory)


@pytest.fixture
def selection(session_factory):
    return SelectionEngine(session_factory, rng=random.Random(42), tick_interval=0.001)


@pytest.fixture
async def open_post(service):
    """Одобренная группа и зарегистрированный пост, привязанный к ней"""
    await service.approve(GROUP_ID, OWNER_ID)
    await service.detect_post(CHANNEL_ID, 7, f"Giveaway! {MENTION_TAG}", MENTION_TAG, linked_group_id=GROUP_ID)
    return PostRef(channel_id=CHANNEL_ID, post_id=7, reply_message_id=55)


def submission(post: PostRef, user_id: int, username: Optional[str] = None, comment: str = "me",
               group_id: int = GROUP_ID) -> EntrySubmission:
    return EntrySubmission(
        group_id=group_id,
        post=post,
        user_id=user_id,
        username=username,
        display_name=f"User {user_id}",
        comment=comment,
        message_id=user_id + 1,
    )


class RecordingDisplay:
    """Запоминает все обновления живого сообщения"""

    def __init__(self, fail_on_start: bool = False):
        self.fail_on_start = fail_on_start
        self.started_with: List[int] = []
        self.ticks: List[int] = []
        self.result = None
        self.failures = 0

    async def started(self, plan, seconds_left, rolling):
        if self.fail_on_start:
            raise RuntimeError("telegram is down")
        self.started_with.append(seconds_left)

    async def tick(self, plan, seconds_left, rolling):
        self.ticks.append(seconds_left)

    async def finished(self, result):
        self.result = result

    async def failed(self, plan):
        self.failures += 1
