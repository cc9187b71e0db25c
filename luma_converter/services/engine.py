"""Вычислительный движок: реестр процедур и исполнение за границей вызова.

Движок хранит процедуры по именам и выполняет их либо в текущем потоке
(`InlineEngine`), либо в отдельном рабочем процессе (`ProcessEngine`).
Результат возвращается как `ResultHandle`, который нужно освободить
после извлечения данных.
"""
from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from concurrent.futures.process import BrokenProcessPool
from typing import Any, Callable, Dict, Optional

import numpy as np

from luma_converter.models.errors import EngineUnavailableError

logger = logging.getLogger(__name__)

Routine = Callable[..., Any]


class ResultHandle:
    """Ссылка на результат, принадлежащий движку."""

    def __init__(self, value: Any) -> None:
        self._value = value
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def to_bytes(self) -> bytes:
        """Копирует результат в новый объект `bytes`, не связанный с памятью движка."""
        if self._released:
            raise EngineUnavailableError("Result handle already released")
        value = self._value
        if isinstance(value, np.ndarray):
            return np.ascontiguousarray(value, dtype=np.uint8).tobytes()
        return bytes(value)

    def release(self) -> None:
        self._value = None
        self._released = True

    def __enter__(self) -> "ResultHandle":
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()


class NumericEngine:
    """Базовый движок: реестр процедур и жизненный цикл."""

    def __init__(self) -> None:
        self._routines: Dict[str, Routine] = {}
        self._started = False

    @property
    def ready(self) -> bool:
        return self._started

    def start(self) -> None:
        self._started = True

    def shutdown(self) -> None:
        self._started = False

    def register(self, name: str, routine: Routine) -> None:
        """Регистрирует процедуру; повторная регистрация заменяет запись."""
        self._routines[name] = routine

    def unregister(self, name: str) -> None:
        self._routines.pop(name, None)

    def call(self, name: str, *args: Any) -> ResultHandle:
        """Выполняет процедуру и возвращает дескриптор результата.

        Raises:
            EngineUnavailableError: движок не запущен или процедура не зарегистрирована.
        """
        if not self._started:
            raise EngineUnavailableError("Numeric engine is not started")
        routine = self._routines.get(name)
        if routine is None:
            raise EngineUnavailableError(f"Routine not registered: {name}")
        return ResultHandle(self._execute(routine, args))

    def _execute(self, routine: Routine, args: tuple) -> Any:
        raise NotImplementedError

    def __enter__(self) -> "NumericEngine":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()


class InlineEngine(NumericEngine):
    """Выполняет процедуры синхронно в вызывающем потоке."""

    def _execute(self, routine: Routine, args: tuple) -> Any:
        return routine(*args)


class ProcessEngine(NumericEngine):
    """Выполняет процедуры в одном рабочем процессе; данные передаются по значению."""

    def __init__(self) -> None:
        super().__init__()
        self._pool: Optional[ProcessPoolExecutor] = None

    @property
    def ready(self) -> bool:
        return self._started and self._pool is not None

    def start(self) -> None:
        if self._pool is not None:
            return
        try:
            self._pool = ProcessPoolExecutor(max_workers=1)
        except (OSError, NotImplementedError) as exc:
            raise EngineUnavailableError(f"Cannot start engine worker: {exc}") from exc
        logger.debug("Engine worker pool started")
        super().start()

    def shutdown(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None
            logger.debug("Engine worker pool stopped")
        super().shutdown()

    def _execute(self, routine: Routine, args: tuple) -> Any:
        pool = self._pool
        if pool is None:
            raise EngineUnavailableError("Engine worker pool is not running")
        try:
            return pool.submit(routine, *args).result()
        except BrokenProcessPool as exc:
            # drop the dead pool so the next start() creates a fresh worker
            pool.shutdown(wait=False)
            self._pool = None
            self._started = False
            raise EngineUnavailableError("Engine worker terminated unexpectedly") from exc


ENGINE_KINDS: Dict[str, Callable[[], NumericEngine]] = {
    "inline": InlineEngine,
    "process": ProcessEngine,
}


def create_engine(kind: str) -> NumericEngine:
    """Создаёт движок по имени: "inline" | "process"."""
    try:
        factory = ENGINE_KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown engine kind: {kind!r} (expected one of {sorted(ENGINE_KINDS)})") from None
    return factory()
