"""Преобразование RGBA-буфера в оттенки серого по яркости (luma, BT.601).

Функции модуля чистые и не хранят состояния: их можно вызывать параллельно
на независимых буферах, в том числе в отдельном процессе движка.
"""
from __future__ import annotations

from typing import Union

import numpy as np

from luma_converter.models.errors import ConversionError, ShapeMismatchError
from luma_converter.models.image_model import CHANNELS, PixelBuffer

LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114

# every exact luma is a multiple of 0.001; float64 error stays far below this
NARROWING_EPS = 1e-6

BufferLike = Union[bytes, bytearray, memoryview, np.ndarray]


def to_grayscale_rgba(flat_rgba: BufferLike, w: int, h: int) -> np.ndarray:
    """RGBA -> luma -> RGBA.

    Args:
        flat_rgba: Плоские байты R,G,B,A длиной w*h*4.
        w: Ширина, px.
        h: Высота, px.

    Returns:
        Новый плоский массив uint8 той же длины: R=G=B=luma, альфа без изменений.

    Raises:
        ShapeMismatchError: длина данных не равна w*h*4 или размеры не положительные.
    """
    if isinstance(flat_rgba, np.ndarray):
        src = flat_rgba.astype(np.uint8, copy=False).reshape(-1)
    else:
        src = np.frombuffer(flat_rgba, dtype=np.uint8)

    expected = max(w, 0) * max(h, 0) * CHANNELS
    if w <= 0 or h <= 0 or src.size != expected:
        raise ShapeMismatchError(expected=expected, actual=int(src.size))

    arr = src.reshape((h, w, CHANNELS)).copy()

    r = arr[:, :, 0].astype(np.float64)
    g = arr[:, :, 1].astype(np.float64)
    b = arr[:, :, 2].astype(np.float64)

    # truncation toward zero, like a direct cast to an integer
    gray = (LUMA_R * r + LUMA_G * g + LUMA_B * b + NARROWING_EPS).astype(np.uint8)

    arr[:, :, 0] = gray
    arr[:, :, 1] = gray
    arr[:, :, 2] = gray

    return arr.reshape(-1)


def run_grayscale_routine(payload: bytes, byte_length: int, w: int, h: int) -> np.ndarray:
    """Точка входа на стороне движка: проверяет метку длины и вызывает преобразование."""
    if len(payload) != byte_length:
        raise ConversionError(
            f"Payload truncated in transit: tagged {byte_length} bytes, received {len(payload)}"
        )
    return to_grayscale_rgba(payload, w, h)


class ProcessService:
    def transform(self, buffer: PixelBuffer) -> PixelBuffer:
        """
        Преобразование буфера в оттенки серого (8-бит на канал, RGBA).
        Исходный буфер не изменяется.
        """
        out = to_grayscale_rgba(buffer.data, buffer.width, buffer.height)
        return PixelBuffer(width=buffer.width, height=buffer.height, data=out.tobytes())

    def is_grayscale(self, buffer: PixelBuffer) -> bool:
        """Проверяет, что у каждого пикселя R == G == B."""
        arr = np.frombuffer(buffer.data, dtype=np.uint8).reshape(-1, CHANNELS)
        return bool(np.all(arr[:, 0] == arr[:, 1]) and np.all(arr[:, 1] == arr[:, 2]))
