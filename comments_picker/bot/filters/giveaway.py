from aiogram.filters import BaseFilter
from aiogram.types import Message
from typing import Any, Dict, Union

from comments_picker.bot.utils.telegram import extract_post_ref, message_text
from comments_picker.config import Settings


class MentionTagFilter(BaseFilter):
    """
    Фильтр постов канала: пропускает только посты с меткой бота в тексте или подписи
    """

    async def __call__(self, message: Message, settings: Settings) -> bool:
        text = message_text(message)
        return bool(text) and settings.mention_tag in text


class ForwardedChannelPostFilter(BaseFilter):
    """
    Фильтр комментариев: сообщение должно быть ответом на пересланный пост канала.
    Найденный пост передается в обработчик аргументом post_ref.
    """

    async def __call__(self, message: Message) -> Union[bool, Dict[str, Any]]:
        post_ref = extract_post_ref(message)
        if post_ref is None:
            return False
        return {"post_ref": post_ref}
