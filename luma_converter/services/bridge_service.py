"""Мост исполнения: передача буфера движку и возврат результата.

Принципы:
- SRP: только маршалинг, вызов процедуры и перевод ошибок в `ConversionError`.
- DIP: зависит от абстрактного `NumericEngine`; конкретный движок передаётся извне.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional, Union

from luma_converter.models.errors import ConversionError, EngineUnavailableError
from luma_converter.models.image_model import PixelBuffer
from luma_converter.services.engine import NumericEngine, create_engine
from luma_converter.services.process_service import run_grayscale_routine

logger = logging.getLogger(__name__)

GRAYSCALE_ROUTINE = "to_grayscale_rgba"

BufferInput = Union[PixelBuffer, bytes, bytearray, memoryview]


class ExecutionBridge:
    """Вызывает преобразование в движке и возвращает собственный `PixelBuffer`.

    Args:
        engine: Движок; по умолчанию создаётся рабочий процесс.
        owns_engine: Останавливать ли движок в `close()`.
    """

    def __init__(self, engine: Optional[NumericEngine] = None, owns_engine: Optional[bool] = None) -> None:
        self._owns_engine = engine is None if owns_engine is None else owns_engine
        self._engine = engine if engine is not None else create_engine("process")
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def engine(self) -> NumericEngine:
        return self._engine

    def invoke(self, buffer: BufferInput, width: int, height: int) -> PixelBuffer:
        """Синхронно преобразует буфер в движке.

        Raises:
            ConversionError: любая ошибка движка или процедуры (в том числе
                `ShapeMismatchError` и `EngineUnavailableError`).
        """
        data = buffer.data if isinstance(buffer, PixelBuffer) else buffer
        payload = bytes(data)
        try:
            self._ensure_ready()
            handle = self._engine.call(GRAYSCALE_ROUTINE, payload, len(payload), int(width), int(height))
            try:
                out = handle.to_bytes()
            finally:
                handle.release()
        except ConversionError as exc:
            logger.warning("Conversion failed: %s", exc)
            raise
        except Exception as exc:
            logger.exception("Unexpected engine failure")
            raise ConversionError(f"Engine failure: {exc}") from exc
        return PixelBuffer(width=int(width), height=int(height), data=out)

    def submit(self, buffer: BufferInput, width: int, height: int) -> Future:
        """Запускает `invoke` в фоновом потоке; UI опрашивает `Future`, не блокируясь."""
        return self._background().submit(self.invoke, buffer, width, height)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if self._owns_engine:
            self._engine.shutdown()

    def __enter__(self) -> "ExecutionBridge":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ---- Helpers ----
    def _ensure_ready(self) -> None:
        """Запускает движок при необходимости и заново регистрирует процедуру."""
        if not self._engine.ready:
            self._engine.start()
        if not self._engine.ready:
            raise EngineUnavailableError("Numeric engine failed to start")
        self._engine.register(GRAYSCALE_ROUTINE, run_grayscale_routine)

    def _background(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="luma-bridge")
        return self._executor
