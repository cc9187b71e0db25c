"""Конвейер конвертации: декодирование -> мост к движку -> кодирование PNG."""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from luma_converter.models.image_model import PixelBuffer
from luma_converter.services.bridge_service import ExecutionBridge
from luma_converter.services.image_service import DEFAULT_OUTPUT_NAME, ImageService, ImageSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    """Результат одной конвертации: буфер, PNG-байты и имя файла для сохранения."""
    buffer: PixelBuffer
    png_bytes: bytes
    filename: str = DEFAULT_OUTPUT_NAME


class ConversionService:
    def __init__(
        self,
        bridge: ExecutionBridge,
        image_service: Optional[ImageService] = None,
        output_name: str = DEFAULT_OUTPUT_NAME,
    ) -> None:
        self._bridge = bridge
        self._image_service = image_service or ImageService()
        self._output_name = output_name
        self._executor: Optional[ThreadPoolExecutor] = None

    def convert(self, source: ImageSource) -> ConversionResult:
        """Выполняет полную конвертацию источника в оттенки серого.

        Raises:
            ConversionError: ошибка декодирования, формы буфера или движка.
        """
        src = self._image_service.decode(source)
        logger.info("Converting %dx%d image", src.width, src.height)
        gray = self._bridge.invoke(src, src.width, src.height)
        png_bytes = self._image_service.encode(gray)
        return ConversionResult(buffer=gray, png_bytes=png_bytes, filename=self._output_name)

    def submit(self, source: ImageSource) -> Future:
        """Запускает `convert` в фоновом потоке."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="luma-convert")
        return self._executor.submit(self.convert, source)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self._bridge.close()
