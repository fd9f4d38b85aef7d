import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from comments_picker.database.repositories import GiveawayPostRepository
from comments_picker.services import DRAW_SECONDS, DrawFailed, PostRef, PreconditionNotMet, Rejection
from comments_picker.utils.helpers import utcnow

from .conftest import CHANNEL_ID, GROUP_ID, MENTION_TAG, RecordingDisplay, submission


async def add_entries(service, post, count):
    for user_id in range(1, count + 1):
        await service.submit_entry(submission(post, user_id, username=f"user{user_id}", comment=f"c{user_id}"))


async def test_draw_picks_distinct_winners_and_closes_post(service, selection, open_post):
    await add_entries(service, open_post, 3)

    plan = await selection.prepare(GROUP_ID, open_post, 2)
    assert plan.total_entries == 3
    assert plan.winners_count == 2

    display = RecordingDisplay()
    result = await selection.run(plan, display)

    assert display.started_with == [DRAW_SECONDS]
    assert display.ticks == list(range(DRAW_SECONDS - 1, 0, -1))
    assert display.result is result
    assert display.failures == 0
    assert len({w.user_id for w in result.winners}) == 2
    assert {w.user_id for w in result.winners} <= {1, 2, 3}

    # Пост закрыт, заявки удалены, история записана в порядке мест
    assert await service.find_pickable(CHANNEL_ID, open_post.post_id) is None
    assert await service.list_entries(GROUP_ID, CHANNEL_ID, open_post.post_id) == []
    history = await service.history_page(GROUP_ID, 1)
    assert [row.winner_user_id for row in history.rows] == [w.user_id for w in result.winners]
    assert history.rows[0].winner_comment == result.winners[0].comment


async def test_winners_count_clamped_to_entries(service, selection, open_post):
    await add_entries(service, open_post, 2)

    plan = await selection.prepare(GROUP_ID, open_post, 5)
    assert plan.winners_count == 2

    result = await selection.run(plan, RecordingDisplay())
    assert sorted(w.user_id for w in result.winners) == [1, 2]


async def test_default_is_one_winner(service, selection, open_post):
    await add_entries(service, open_post, 4)

    plan = await selection.prepare(GROUP_ID, open_post)
    result = await selection.run(plan, RecordingDisplay())
    assert len(result.winners) == 1


async def test_prepare_rejects_unknown_post(selection, open_post):
    with pytest.raises(PreconditionNotMet) as exc:
        await selection.prepare(GROUP_ID, PostRef(CHANNEL_ID, 404))
    assert exc.value.reason is Rejection.POST_UNAVAILABLE


async def test_prepare_rejects_other_group(service, selection, open_post):
    await add_entries(service, open_post, 1)

    with pytest.raises(PreconditionNotMet) as exc:
        await selection.prepare(GROUP_ID - 1, open_post)
    assert exc.value.reason is Rejection.GROUP_MISMATCH


async def test_prepare_rejects_post_without_entries(selection, open_post):
    with pytest.raises(PreconditionNotMet) as exc:
        await selection.prepare(GROUP_ID, open_post)
    assert exc.value.reason is Rejection.NO_ENTRIES


async def test_post_picked_only_once(service, selection, open_post):
    await add_entries(service, open_post, 2)
    await selection.run(await selection.prepare(GROUP_ID, open_post), RecordingDisplay())

    with pytest.raises(PreconditionNotMet) as exc:
        await selection.prepare(GROUP_ID, open_post)
    assert exc.value.reason is Rejection.POST_UNAVAILABLE


async def test_concurrent_prepare_claims_once(service, selection, open_post):
    await add_entries(service, open_post, 3)

    results = await asyncio.gather(
        selection.prepare(GROUP_ID, open_post),
        selection.prepare(GROUP_ID, open_post),
        return_exceptions=True,
    )

    plans = [r for r in results if not isinstance(r, Exception)]
    errors = [r for r in results if isinstance(r, PreconditionNotMet)]
    assert len(plans) == 1
    assert [e.reason for e in errors] == [Rejection.DRAW_IN_PROGRESS]


async def test_stale_claim_is_taken_over(service, session_factory, selection, open_post):
    await add_entries(service, open_post, 1)
    post = await service.find_pickable(CHANNEL_ID, open_post.post_id)

    async with session_factory() as session:
        assert await GiveawayPostRepository(session).claim_for_drawing(post.id, now=utcnow() - timedelta(minutes=10))

    plan = await selection.prepare(GROUP_ID, open_post)
    assert plan.post.id == post.id


async def test_entries_during_countdown_are_cleared(service, selection, open_post):
    await add_entries(service, open_post, 2)
    plan = await selection.prepare(GROUP_ID, open_post)

    # Заявка во время отсчета принимается, но в розыгрыш не попадает
    assert await service.submit_entry(submission(open_post, 99)) is not None

    result = await selection.run(plan, RecordingDisplay())
    assert 99 not in {w.user_id for w in result.winners}
    assert await service.list_entries(GROUP_ID, CHANNEL_ID, open_post.post_id) == []


async def test_failed_commit_releases_claim(service, selection, open_post):
    await add_entries(service, open_post, 2)
    plan = await selection.prepare(GROUP_ID, open_post)
    display = RecordingDisplay()

    with patch.object(GiveawayPostRepository, "resolve", AsyncMock(side_effect=RuntimeError("db down"))):
        with pytest.raises(DrawFailed):
            await selection.run(plan, display)

    assert display.failures == 1
    assert display.result is None
    # Пост остается открытым, заявки на месте, можно пробовать снова
    assert len(await service.list_entries(GROUP_ID, CHANNEL_ID, open_post.post_id)) == 2
    retry = await selection.prepare(GROUP_ID, open_post)
    assert retry.total_entries == 2


async def test_failed_start_message_releases_claim(service, selection, open_post):
    await add_entries(service, open_post, 1)
    plan = await selection.prepare(GROUP_ID, open_post)

    with pytest.raises(DrawFailed):
        await selection.run(plan, RecordingDisplay(fail_on_start=True))

    assert (await selection.prepare(GROUP_ID, open_post)).total_entries == 1


async def test_history_pages_of_eight(service, selection):
    await service.approve(GROUP_ID, 1)
    for post_id in range(10, 20):
        await service.detect_post(CHANNEL_ID, post_id, MENTION_TAG, MENTION_TAG, linked_group_id=GROUP_ID)
        await service.submit_entry(submission(PostRef(CHANNEL_ID, post_id), post_id))
        await selection.run(await selection.prepare(GROUP_ID, PostRef(CHANNEL_ID, post_id)), RecordingDisplay())

    first = await service.history_page(GROUP_ID, 1)
    assert (first.page, first.total_pages, first.total_count, len(first.rows)) == (1, 2, 10, 8)
    assert first.rows[0].channel_post_id == 19
    assert first.has_next and not first.has_prev

    second = await service.history_page(GROUP_ID, 2)
    assert len(second.rows) == 2
    assert second.offset == 8
    assert second.has_prev and not second.has_next

    assert (await service.history_page(GROUP_ID, 9)).page == 2
    assert (await service.history_page(GROUP_ID, 0)).page == 1


async def test_empty_history_page(service):
    empty = await service.history_page(GROUP_ID, 3)
    assert empty.is_empty
    assert (empty.page, empty.total_pages, empty.rows) == (1, 1, [])
