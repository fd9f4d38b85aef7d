from typing import Optional

from aiogram.utils.markdown import hbold, hitalic, hcode, hlink
from aiogram.utils.text_decorations import html_decoration

from comments_picker.database.models import Entry
from comments_picker.database.repositories import HistoryPage
from comments_picker.services.errors import Rejection
from comments_picker.utils.helpers import format_datetime

SEPARATOR = "━━━━━━━━━━━━━━━━━━━━"
BRAND = "— 𝐂𝐌𝐓 𝐏𝐈𝐂𝐊𝐄𝐑 —"
PROGRESS_WIDTH = 10
MEDALS = ("🥇", "🥈", "🥉")
GENERIC_MEDAL = "🏅"
COMMENT_PREVIEW_LIMIT = 200  # 10 победителей должны влезть в лимит Telegram 4096 символов


def mention_by_id(user_id: int, name: Optional[str]) -> str:
    return hlink(name or "User", f"tg://user?id={user_id}")


def winner_label(user_id: int, username: Optional[str], name: Optional[str]) -> str:
    if username:
        return f"@{html_decoration.quote(username)}"
    return mention_by_id(user_id, name or "Winner")


def short_comment(comment: Optional[str], limit: int = COMMENT_PREVIEW_LIMIT) -> str:
    """Обрезает комментарий до limit символов (до экранирования)"""
    comment = (comment or "").strip()
    if len(comment) <= limit:
        return comment
    return comment[:limit - 1].rstrip() + "…"


def rank_marker(position: int) -> str:
    """Медаль за место (с нуля): первые три - золото/серебро/бронза"""
    return MEDALS[position] if position < len(MEDALS) else GENERIC_MEDAL


def progress_bar(seconds_left: int, total: int) -> str:
    """██████░░░░  14/20s"""
    done = total - seconds_left
    filled = max(0, min(PROGRESS_WIDTH, int(done / total * PROGRESS_WIDTH + 0.5)))
    return f"{'█' * filled}{'░' * (PROGRESS_WIDTH - filled)}  {done}/{total}s"


def welcome(user_id: int, first_name: Optional[str], mention_tag: str) -> str:
    return (
        f"👋 Hello {mention_by_id(user_id, first_name)}\n\n"
        f"━━━━━━━━━━━━━━━━\n"
        f"💜 {hbold('Welcome To')} 💜\n"
        f"🎁 {hbold('Comment Picker Bot')}\n"
        f"━━━━━━━━━━━━━━━━\n\n"
        f"This bot runs giveaways for Telegram channel posts and their discussion groups:\n"
        f"✔️ picks random winners among the comments\n"
        f"✔️ with a live 20s countdown\n"
        f"✔️ fair and safe, 1 user = 1 entry per post\n\n"
        f"━━━━━━━━━━━━━━━━\n"
        f"📌 {hbold('How to use')}\n"
        f"━━━━━━━━━━━━━━━━\n"
        f"1️⃣ Add the bot to the {hbold('discussion group')} of your channel\n"
        f"2️⃣ The owner sends {hbold('/approve')} in that group\n"
        f"3️⃣ Mention {html_decoration.quote(mention_tag)} in the channel giveaway post\n"
        f"4️⃣ Reply to the forwarded post in the group with\n"
        f"   {hbold('/pickwinner')} (or) {hbold('/pickwinner 2')} (or) {hbold('/pickwinner 3')}\n"
        f"5️⃣ {hbold('/winnerlist')} shows the winner history\n\n"
        f"🍀 {hbold('Good Luck & Happy Giveaway!')}"
    )


LOGO_CAPTION = f"🎁 {hbold('Comment Picker')}\n{hitalic('For Telegram Giveaway')}"


def approved(mention_tag: str) -> str:
    return f"✅ {hbold('Approved')}\n\nThis group can now use {html_decoration.quote(mention_tag)}."


REJECTIONS = {
    Rejection.WRONG_CHAT: "❗ Use this command inside the discussion group.",
    Rejection.NOT_OWNER: "❌ Owner only command.",
    Rejection.NOT_APPROVED: (
        "❌ This group is not approved yet.\n"
        "Ask the bot owner to send /approve in this group."
    ),
    Rejection.NOT_ADMIN: "❌ Admin only command.",
    Rejection.NOT_A_REPLY: (
        "⚠️ Reply to the forwarded giveaway post with\n"
        f"{hbold('/pickwinner')} (or {hbold('/pickwinner 3')})."
    ),
    Rejection.POST_UNAVAILABLE: "❌ This giveaway post is already picked (or it was never registered).",
    Rejection.GROUP_MISMATCH: (
        "⚠️ This post is not linked to this group "
        "(or the post does not mention the bot)."
    ),
    Rejection.NO_ENTRIES: "❌ There are no entries under this post yet.",
    Rejection.DRAW_IN_PROGRESS: "⏳ Winners for this post are already being picked.",
}


def rejection(reason: Rejection) -> str:
    return REJECTIONS[reason]


def draw_progress(seconds_left: int, total: int, entries: int, rolling: Optional[Entry]) -> str:
    text = (
        f"{hbold('🌀 Picking the winner...')}\n"
        f"{SEPARATOR}\n"
        f"{hbold('📥 Entries')}: {hbold(entries)}\n"
        f"{hbold('⏳ Countdown')}: {hbold(f'{seconds_left}s')}\n\n"
        f"{hbold('Progress')}\n"
        f"{hcode(progress_bar(seconds_left, total))}"
    )
    if rolling is not None:
        text += f"\n\n{hbold('🔄 Rolling')}: {hitalic(rolling.rolling_name)}"
    return f"{text}\n\n{hitalic(BRAND)}"


def draw_result(channel_post_id: int, entries: int, winners, mention_tag: str) -> str:
    lines = []
    for position, winner in enumerate(winners):
        lines.append(
            f"{rank_marker(position)} {hbold(f'#{position + 1}')}  "
            f"{winner_label(winner.user_id, winner.username, winner.display_name)}\n"
            f"💬 {hitalic(short_comment(winner.comment))}"
        )

    return (
        f"🏆 {hbold('𝐂𝐌𝐓 𝐏𝐈𝐂𝐊𝐄𝐑 • RESULT')}\n"
        f"{SEPARATOR}\n"
        f"🎉 {hbold('The winners are here!')}\n"
        f"🧾 {hbold('Post')}: {hbold(channel_post_id)}\n"
        f"👥 {hbold('Total Entries')}: {hbold(entries)}\n"
        f"🏅 {hbold('Winners')}: {hbold(len(winners))}\n\n"
        + "\n\n".join(lines)
        + f"\n\n{SEPARATOR}\n"
        f"🪪 {hbold('POWERED BY')} {html_decoration.quote(mention_tag)}"
    )


DRAW_FAILED = "⚠️ Something went wrong while saving the result. The post stays open, try /pickwinner again."


def winner_list(history: HistoryPage, mention_tag: str, tz_name: str) -> str:
    if history.is_empty:
        return (
            f"📭 {hbold('WINNER HISTORY')}\n"
            f"{SEPARATOR}\n"
            f"There is no winner history in this group yet."
        )

    header = (
        f"🏆 {hbold('𝐖𝐈𝐍𝐍𝐄𝐑 𝐇𝐈𝐒𝐓𝐎𝐑𝐘')}\n"
        f"{SEPARATOR}\n"
        f"📦 {hbold('Total Winners')}: {hbold(history.total_count)}\n"
        f"📄 {hbold('Page')}: {hbold(f'{history.page}/{history.total_pages}')}\n"
        f"{SEPARATOR}"
    )

    blocks = []
    for index, row in enumerate(history.rows):
        number = history.offset + index + 1
        blocks.append(
            f"🥇 {hbold(f'#{number}')}\n"
            f"👤 {winner_label(row.winner_user_id, row.winner_username, row.winner_name)}\n"
            f"🧾 {hbold('Post')}: {hbold(row.channel_post_id)}\n"
            f"🕒 {hbold(format_datetime(row.picked_at, tz_name))}\n"
            f"💬 {hitalic(short_comment(row.winner_comment))}"
        )

    body = f"\n\n{SEPARATOR}\n\n".join(blocks)
    footer = f"{SEPARATOR}\n🪪 {hbold('POWERED BY')} {html_decoration.quote(mention_tag)}"
    return f"{header}\n\n{body}\n\n{footer}"
