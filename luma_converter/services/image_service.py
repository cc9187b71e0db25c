"""Загрузка, декодирование и кодирование изображений.

Принципы:
- SRP: класс отвечает только за перевод «изображение <-> RGBA-буфер».
- OCP: новые источники (стрим, URL) можно добавить отдельными ветками `_open`.
- LSP/ISP: возвращает `ImageData`/`PixelBuffer` с предсказуемыми полями.
"""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from luma_converter.models.errors import DecodeError, ShapeMismatchError
from luma_converter.models.image_model import ImageData, PixelBuffer

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_NAME = "grayscale.png"

ImageSource = Union[bytes, bytearray, str, Path, ImageData, Image.Image]


class ImageService:
    def load_image(self, file_path: str | Path) -> ImageData:
        """Загружает изображение с диска и возвращает его вместе с метаданными.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `ImageData` c `PIL.Image.Image` (в режиме RGBA), размерами, режимом и размером файла.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            DecodeError: если файл не распознан как изображение.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")

        with path.open("rb") as fh:
            raw = fh.read()
        image_data = self.load_bytes(raw)

        try:
            size_bytes: Optional[int] = path.stat().st_size
        except OSError:
            size_bytes = None

        return ImageData(
            path=path,
            pil_image=image_data.pil_image,
            width=image_data.width,
            height=image_data.height,
            mode=image_data.mode,
            size_bytes=size_bytes,
        )

    def load_bytes(self, raw: bytes | bytearray) -> ImageData:
        """Декодирует изображение из памяти (например, содержимое выбранного файла)."""
        pil_image, mode = self._open_bytes(bytes(raw))
        width, height = pil_image.size
        return ImageData(
            path=None,
            pil_image=pil_image,
            width=width,
            height=height,
            mode=mode,
            size_bytes=len(raw),
        )

    def decode(self, source: ImageSource) -> PixelBuffer:
        """Переводит источник в плоский RGBA-буфер натурального размера.

        Raises:
            DecodeError: источник не является растровым изображением.
            FileNotFoundError: путь не существует.
        """
        if isinstance(source, ImageData):
            rgba = source.pil_image
        elif isinstance(source, Image.Image):
            rgba = source
        elif isinstance(source, (bytes, bytearray)):
            rgba, _mode = self._open_bytes(bytes(source))
        elif isinstance(source, (str, Path)):
            rgba = self.load_image(source).pil_image
        else:
            raise DecodeError(f"Неподдерживаемый источник изображения: {type(source).__name__}")

        if rgba.mode != "RGBA":
            rgba = rgba.convert("RGBA")
        width, height = rgba.size
        if width <= 0 or height <= 0:
            raise DecodeError(f"Пустое изображение: {width}x{height}")
        return PixelBuffer(width=width, height=height, data=rgba.tobytes())

    def to_image(self, buffer: PixelBuffer) -> Image.Image:
        """Собирает RGBA-изображение PIL из буфера (копия данных)."""
        if not buffer.is_valid:
            raise ShapeMismatchError(expected=buffer.expected_length, actual=len(buffer.data))
        return Image.frombytes("RGBA", (buffer.width, buffer.height), buffer.data)

    def encode(self, buffer: PixelBuffer) -> bytes:
        """Кодирует буфер в PNG (без потерь).

        Raises:
            ShapeMismatchError: длина буфера не соответствует размерам.
        """
        image = self.to_image(buffer)
        out = io.BytesIO()
        image.save(out, format="PNG")
        return out.getvalue()

    def save(self, png_bytes: bytes, target: str | Path, filename: str = DEFAULT_OUTPUT_NAME) -> Path:
        """Записывает закодированный результат; для каталога используется `filename`."""
        path = Path(target)
        if path.is_dir():
            path = path / filename
        path.write_bytes(png_bytes)
        logger.info("Saved %d bytes to %s", len(png_bytes), path)
        return path

    # ---- Helpers ----
    def _open_bytes(self, raw: bytes) -> tuple[Image.Image, str]:
        """Открывает байты через PIL, учитывает EXIF-ориентацию, берёт первый кадр."""
        if not raw:
            logger.warning("Empty image stream received")
            raise DecodeError("Пустые данные изображения")
        try:
            with Image.open(io.BytesIO(raw)) as img:
                mode = img.mode
                img.seek(0)
                oriented = ImageOps.exif_transpose(img)
                rgba = oriented.convert("RGBA")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, SyntaxError) as exc:
            logger.warning("Failed to decode image: %s", exc)
            raise DecodeError(f"Данные не являются изображением: {exc}") from exc
        return rgba, mode
