from aiogram.filters.callback_data import CallbackData


class WinnerListCallback(CallbackData, prefix="wl"):
    """
    Класс для работы с callback-данными пагинации истории победителей
    """
    action: str  # page | noop
    page: int = 0
