"""Модели данных для изображений и пиксельных буферов.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image

CHANNELS = 4  # R, G, B, A


@dataclass(frozen=True)
class ImageData:
    """Неизменяемая модель изображения и его метаданные.

    Fields:
        path: Путь к исходному файлу (None для изображений из памяти).
        pil_image: Загруженное изображение PIL (RGBA).
        width: Ширина, px.
        height: Высота, px.
        mode: Исходный режим PIL до приведения к RGBA, например "P" или "RGB".
        size_bytes: Размер файла, если доступен.
    """
    path: Optional[Path]
    pil_image: Image.Image
    width: int
    height: int
    mode: str
    size_bytes: Optional[int]


@dataclass(frozen=True)
class PixelBuffer:
    """Плоский RGBA-буфер: каналы R, G, B, A подряд, строки сверху вниз.

    `data` хранится как `bytes`, поэтому этап, отдавший буфер дальше,
    не может его изменить. Длина не проверяется при создании: несоответствие
    обнаруживает и сообщает преобразование.
    """
    width: int
    height: int
    data: bytes

    @property
    def expected_length(self) -> int:
        return self.width * self.height * CHANNELS

    @property
    def is_valid(self) -> bool:
        return self.width > 0 and self.height > 0 and len(self.data) == self.expected_length
