"""Виджет просмотра: исходное изображение и результат рядом, масштаб «по размеру окна».

Принципы:
- SRP: отвечает только за представление изображений.
- Чистый код: публичный API отделён от обработчиков событий.
"""
from __future__ import annotations

from typing import Optional, Tuple

import customtkinter as ctk
import tkinter as tk
from PIL import Image, ImageTk

GAP = 16


class ImageViewer(ctk.CTkFrame):
    """Канва с режимом side-by-side «до/после»."""
    def __init__(self, master: ctk.CTk | tk.Misc, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self._canvas = tk.Canvas(self, highlightthickness=0, bg=self._get_canvas_bg())
        self._canvas.grid(row=0, column=0, sticky="nsew")

        self._original_image: Optional[Image.Image] = None
        self._processed_image: Optional[Image.Image] = None
        self._tk_image_before: Optional[ImageTk.PhotoImage] = None
        self._tk_image_after: Optional[ImageTk.PhotoImage] = None

        self._canvas.bind("<Configure>", self._on_canvas_resize)

    # ---- Public API ----
    def set_image(self, image: Image.Image) -> None:
        """Устанавливает исходное изображение и сбрасывает результат."""
        self._original_image = image
        self._processed_image = None
        self._render_image()

    def set_processed_image(self, image: Optional[Image.Image]) -> None:
        """Устанавливает результат (может быть None) и перерисовывает виджет."""
        self._processed_image = image
        self._render_image()

    # ---- Internals ----
    def _on_canvas_resize(self, _event: tk.Event) -> None:
        if self._original_image is None:
            return
        self._render_image()

    def _render_image(self) -> None:
        self._canvas.delete("all")
        self._tk_image_before = None
        self._tk_image_after = None
        if self._original_image is None:
            return

        canvas_w = max(1, int(self._canvas.winfo_width()))
        canvas_h = max(1, int(self._canvas.winfo_height()))
        panes = 2 if self._processed_image is not None else 1
        scaled_w, scaled_h = self._fit_size(self._original_image.size, canvas_w, canvas_h, panes)

        content_w = scaled_w * panes + GAP * (panes - 1)
        ox = max(0, (canvas_w - content_w) // 2)
        oy = max(0, (canvas_h - scaled_h) // 2)

        before = self._original_image.resize((scaled_w, scaled_h), Image.Resampling.LANCZOS)
        self._tk_image_before = ImageTk.PhotoImage(before)
        self._canvas.create_image(ox, oy, image=self._tk_image_before, anchor="nw")

        if self._processed_image is not None:
            after = self._processed_image.resize((scaled_w, scaled_h), Image.Resampling.LANCZOS)
            self._tk_image_after = ImageTk.PhotoImage(after)
            self._canvas.create_image(ox + scaled_w + GAP, oy, image=self._tk_image_after, anchor="nw")

    @staticmethod
    def _fit_size(size: Tuple[int, int], canvas_w: int, canvas_h: int, panes: int) -> Tuple[int, int]:
        img_w, img_h = size
        if img_w == 0 or img_h == 0:
            return 1, 1
        avail_w = max(1, (canvas_w - GAP * (panes - 1)) // panes)
        scale = max(0.01, min(4.0, min(avail_w / img_w, canvas_h / img_h)))
        return max(1, int(img_w * scale)), max(1, int(img_h * scale))

    def _get_canvas_bg(self) -> str:
        # CTk does not expose canvas theme, so pick neutral
        return "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f2f2f2"
