import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_WINNERS = 1
MAX_WINNERS = 10  # Ограничение размера одного розыгрыша


def clamp_winners_count(requested: Optional[int]) -> int:
    """Количество победителей в диапазоне [1, MAX_WINNERS]; без аргумента - один"""
    if requested is None:
        return DEFAULT_WINNERS
    return min(max(DEFAULT_WINNERS, requested), MAX_WINNERS)


def pick_winners(entries: Sequence[T], count: int, rng: random.Random) -> List[T]:
    """
    Выбирает победителей без повторов и весов.

    Перемешивание Фишера-Йетса (random.shuffle) всей копии списка,
    победители - первые count элементов.

    Args:
        entries (Sequence[T]): Все заявки
        count (int): Сколько победителей нужно (урезается до числа заявок)
        rng (random.Random): Источник случайности

    Returns:
        List[T]: Победители в порядке мест
    """
    shuffled = list(entries)
    rng.shuffle(shuffled)
    return shuffled[:max(0, min(count, len(shuffled)))]


def sample_rolling(entries: Sequence[T], rng: random.Random) -> Optional[T]:
    """Случайная заявка для "прокрутки" на экране; на итог не влияет"""
    if not entries:
        return None
    return rng.choice(entries)
