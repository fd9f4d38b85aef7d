from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from comments_picker.database.repositories import HistoryPage
from .callback_data import WinnerListCallback


def get_winner_list_keyboard(history: HistoryPage) -> InlineKeyboardMarkup:
    """
    Возвращает клавиатуру навигации по истории победителей

    Args:
        history (HistoryPage): Текущая страница

    Returns:
        InlineKeyboardMarkup: ⬅️ Prev | 📄 p/t | Next ➡️ (крайние кнопки только если есть куда листать)
    """
    nav = []

    if history.has_prev:
        nav.append(InlineKeyboardButton(
            text="⬅️ Prev",
            callback_data=WinnerListCallback(action="page", page=history.page - 1).pack()
        ))

    nav.append(InlineKeyboardButton(
        text=f"📄 {history.page}/{history.total_pages}",
        callback_data=WinnerListCallback(action="noop").pack()
    ))

    if history.has_next:
        nav.append(InlineKeyboardButton(
            text="Next ➡️",
            callback_data=WinnerListCallback(action="page", page=history.page + 1).pack()
        ))

    return InlineKeyboardMarkup(inline_keyboard=[nav])
