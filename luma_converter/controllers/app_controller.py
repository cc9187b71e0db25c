"""Контроллер приложения: оркестрация UI и сервисов.

SOLID:
- SRP: класс управляет связями между UI и сервисами (без логики обработки изображений).
- DIP: зависит от сервисов как от ролей; конкретные реализации передаются извне.
Clean Code:
- Обработчики компактны; тяжёлая логика вынесена в сервисы.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import Future
from dataclasses import dataclass
from tkinter import TclError, filedialog, messagebox
from typing import Optional

import customtkinter as ctk

from luma_converter.models.errors import ConversionError
from luma_converter.models.image_model import ImageData
from luma_converter.services.conversion_service import ConversionResult, ConversionService
from luma_converter.services.image_service import ImageService
from luma_converter.ui.image_viewer import ImageViewer
from luma_converter.ui.sidebar import Sidebar

logger = logging.getLogger(__name__)

POLL_MS = 50


@dataclass
class AppController:
    """Связывает элементы UI с прикладной логикой.

    Ответственности:
    - Инициализация и бинд событий (UI -> контроллер).
    - Загрузка изображений через `ImageService`.
    - Конвертация через `ConversionService` без блокировки цикла Tk.
    - Удержание индикатора занятости не меньше `min_busy_ms`.
    """
    viewer: ImageViewer
    sidebar: Sidebar
    window: ctk.CTk
    conversion_service: ConversionService
    min_busy_ms: int = 300

    _image_service: ImageService = ImageService()
    _current_image: Optional[ImageData] = None
    _result: Optional[ConversionResult] = None
    _pending: Optional[Future] = None
    _busy_since: float = 0.0

    def bind_events(self) -> None:
        """Регистрирует обработчики событий между UI-компонентами."""
        self.sidebar.on_open_file = self._handle_open_file
        self.sidebar.on_convert = self._handle_convert
        self.sidebar.on_save = self._handle_save

    # ---- Handlers ----
    def _handle_open_file(self) -> None:
        if self._pending is not None:
            return
        try:
            file_path = filedialog.askopenfilename(
                title="Выберите изображение",
                filetypes=(
                    ("Images", "*.png *.jpg *.jpeg *.bmp *.gif *.tiff *.webp"),
                    ("All files", "*.*"),
                ),
            )
        except TclError:
            # Silent fail if dialog cannot open
            return

        if not file_path:
            return

        try:
            image_data = self._image_service.load_image(file_path)
        except (FileNotFoundError, ConversionError) as exc:
            messagebox.showerror("Ошибка", str(exc), parent=self.window)
            return

        self._current_image = image_data
        self._result = None

        self.viewer.set_image(image_data.pil_image)
        self.sidebar.set_image_info(image_data)
        self.sidebar.set_convert_enabled(True)
        self.sidebar.set_save_enabled(False)
        self.sidebar.set_status("Готово к конвертации")

    def _handle_convert(self) -> None:
        if self._current_image is None or self._pending is not None:
            return
        self._result = None
        self.viewer.set_processed_image(None)
        self.sidebar.set_busy(True)
        self.sidebar.set_status("Конвертация…")
        self._busy_since = time.monotonic()
        self._pending = self.conversion_service.submit(self._current_image)
        self.window.after(POLL_MS, self._poll_conversion)

    def _handle_save(self) -> None:
        if self._result is None:
            return
        try:
            target = filedialog.asksaveasfilename(
                title="Сохранить результат",
                initialfile=self._result.filename,
                defaultextension=".png",
                filetypes=(("PNG", "*.png"),),
            )
        except TclError:
            return

        if not target:
            return

        try:
            saved = self._image_service.save(self._result.png_bytes, target, filename=self._result.filename)
        except OSError as exc:
            messagebox.showerror("Ошибка", f"Не удалось сохранить файл: {exc}", parent=self.window)
            return
        self.sidebar.set_status(f"Сохранено: {saved.name}")

    # ---- Helpers ----
    def _poll_conversion(self) -> None:
        """Ждёт завершения фоновой задачи, не блокируя цикл событий."""
        future = self._pending
        if future is None:
            return
        elapsed_ms = (time.monotonic() - self._busy_since) * 1000.0
        if not future.done() or elapsed_ms < self.min_busy_ms:
            self.window.after(POLL_MS, self._poll_conversion)
            return

        self._pending = None
        self.sidebar.set_busy(False)
        self.sidebar.set_convert_enabled(self._current_image is not None)

        try:
            result = future.result()
        except ConversionError as exc:
            self.sidebar.set_status("Ошибка конвертации")
            messagebox.showerror("Ошибка конвертации", str(exc), parent=self.window)
            return
        except Exception as exc:
            logger.exception("Unexpected conversion failure")
            self.sidebar.set_status("Ошибка конвертации")
            messagebox.showerror("Ошибка конвертации", f"Непредвиденная ошибка: {exc}", parent=self.window)
            return

        self._result = result
        self.viewer.set_processed_image(self._image_service.to_image(result.buffer))
        self.sidebar.set_save_enabled(True)
        self.sidebar.set_status("Готово")
        logger.info("Conversion finished in %.0f ms", elapsed_ms)
