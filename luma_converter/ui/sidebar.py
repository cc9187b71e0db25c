"""Боковая панель: открытие файла, информация, конвертация и сохранение.

Принципы:
- SRP: управляет только UI, не содержит алгоритмов.
- ISP: события наружу через `on_*`, состояние внутрь через компактные `set_*`.
"""
from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from luma_converter.models.image_model import ImageData


def _format_size(size_bytes: Optional[int]) -> str:
    if size_bytes is None:
        return "Размер: —"
    if size_bytes < 1024:
        return f"Размер: {size_bytes} Б"
    if size_bytes < 1024 * 1024:
        return f"Размер: {size_bytes / 1024:.1f} КБ"
    return f"Размер: {size_bytes / (1024 * 1024):.2f} МБ"


class Sidebar(ctk.CTkFrame):
    """Панель инструментов с блоками: файл, информация, конвертация."""
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, width=280, **kwargs)

        self.grid_columnconfigure(0, weight=1)

        # Callbacks
        self.on_open_file: Optional[Callable[[], None]] = None
        self.on_convert: Optional[Callable[[], None]] = None
        self.on_save: Optional[Callable[[], None]] = None

        # File
        self._title = ctk.CTkLabel(self, text="Инструменты", font=ctk.CTkFont(size=16, weight="bold"))
        self._title.grid(row=0, column=0, padx=8, pady=(8, 4), sticky="w")

        self._open_btn = ctk.CTkButton(self, text="Открыть изображение…", command=self._emit_open_file)
        self._open_btn.grid(row=1, column=0, padx=8, pady=(0, 12), sticky="ew")

        # Info section
        self._info_title = ctk.CTkLabel(self, text="Информация", font=ctk.CTkFont(size=16, weight="bold"))
        self._info_title.grid(row=2, column=0, padx=8, pady=(8, 4), sticky="w")

        self._path_val = ctk.StringVar(value="—")
        self._size_val = ctk.StringVar(value="—")
        self._dims_val = ctk.StringVar(value="—")
        self._mode_val = ctk.StringVar(value="—")

        self._info_path = ctk.CTkLabel(self, textvariable=self._path_val, wraplength=250, anchor="w", justify="left")
        self._info_size = ctk.CTkLabel(self, textvariable=self._size_val, anchor="w", justify="left")
        self._info_dims = ctk.CTkLabel(self, textvariable=self._dims_val, anchor="w", justify="left")
        self._info_mode = ctk.CTkLabel(self, textvariable=self._mode_val, anchor="w", justify="left")

        self._info_path.grid(row=3, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_size.grid(row=4, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_dims.grid(row=5, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._info_mode.grid(row=6, column=0, padx=8, pady=(0, 10), sticky="ew")

        # filler
        self.grid_rowconfigure(19, weight=1)

        # Processing
        self._proc_title = ctk.CTkLabel(self, text="Обработка", font=ctk.CTkFont(size=16, weight="bold"))
        self._proc_title.grid(row=20, column=0, padx=8, pady=(8, 4), sticky="w")

        self._convert_btn = ctk.CTkButton(self, text="В оттенки серого", command=self._emit_convert, state="disabled")
        self._convert_btn.grid(row=21, column=0, padx=8, pady=(0, 8), sticky="ew")

        self._status_val = ctk.StringVar(value="Откройте изображение")
        self._status = ctk.CTkLabel(self, textvariable=self._status_val, wraplength=250, anchor="w", justify="left")
        self._status.grid(row=22, column=0, padx=8, pady=(0, 4), sticky="ew")

        # Busy indicator (hidden by default)
        self._progress = ctk.CTkProgressBar(self, mode="indeterminate")

        self._save_btn = ctk.CTkButton(self, text="Сохранить PNG…", command=self._emit_save, state="disabled")
        self._save_btn.grid(row=24, column=0, padx=8, pady=(4, 12), sticky="ew")

    # ---- Public API (sync from controller) ----
    def set_image_info(self, image: ImageData) -> None:
        self._path_val.set(f"Файл: {image.path.name}" if image.path is not None else "Файл: —")
        self._size_val.set(_format_size(image.size_bytes))
        self._dims_val.set(f"Размеры: {image.width} × {image.height}")
        self._mode_val.set(f"Режим: {image.mode}")

    def set_convert_enabled(self, enabled: bool) -> None:
        self._convert_btn.configure(state="normal" if enabled else "disabled")

    def set_save_enabled(self, enabled: bool) -> None:
        self._save_btn.configure(state="normal" if enabled else "disabled")

    def set_status(self, text: str) -> None:
        self._status_val.set(text)

    def set_busy(self, busy: bool) -> None:
        """Показывает/скрывает индикатор занятости и блокирует кнопки."""
        if busy:
            self._progress.grid(row=23, column=0, padx=8, pady=(0, 8), sticky="ew")
            self._progress.start()
        else:
            self._progress.stop()
            self._progress.grid_remove()
        self._open_btn.configure(state="disabled" if busy else "normal")
        if busy:
            self.set_convert_enabled(False)
            self.set_save_enabled(False)

    # ---- Internals ----
    def _emit_open_file(self) -> None:
        if self.on_open_file:
            self.on_open_file()

    def _emit_convert(self) -> None:
        if self.on_convert:
            self.on_convert()

    def _emit_save(self) -> None:
        if self.on_save:
            self.on_save()
