import asyncio
import logging
from contextlib import suppress
from typing import Awaitable, Callable, Optional


class Countdown:
    """
    Обратный отсчет с периодическими обновлениями.

    Тикер раз в interval вызывает on_tick(seconds_left) для seconds_left = total-1 .. 1
    и завершается на отметке total * interval. Ошибки on_tick логируются и не
    прерывают отсчет. Зависший on_tick не держит отсчет дольше total * interval + grace:
    после этого тикер отменяется и дожидается.
    """

    def __init__(self, total: int, on_tick: Callable[[int], Awaitable[None]], interval: float = 1.0,
                 grace: Optional[float] = None):
        self.total = total
        self.interval = interval
        self.grace = max(interval, 1.0) if grace is None else grace
        self.on_tick = on_tick
        self._ticker: Optional[asyncio.Task] = None

    async def run(self) -> None:
        self._ticker = asyncio.create_task(self._tick_loop(), name="countdown_ticker")
        try:
            await asyncio.wait({self._ticker}, timeout=self.total * self.interval + self.grace)
        finally:
            if not self.finished:
                logging.warning("Обновление отсчета не уложилось в срок, тикер остановлен")
                self._ticker.cancel()
            with suppress(asyncio.CancelledError):
                await self._ticker

    @property
    def finished(self) -> bool:
        return self._ticker is not None and self._ticker.done()

    async def _tick_loop(self) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        left = self.total
        tick = 0
        while True:
            tick += 1
            # Сон до следующей отметки, а не на interval: медленные правки не копят сдвиг
            await asyncio.sleep(max(0.0, started + tick * self.interval - loop.time()))
            left -= 1
            if left <= 0:
                return
            try:
                await self.on_tick(left)
            except Exception as e:
                logging.warning(f"Ошибка обновления отсчета ({left}s): {e}")
