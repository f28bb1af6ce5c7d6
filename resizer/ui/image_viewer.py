"""Виджет предпросмотра: исходник и результат кодирования, режимы сравнения.

Принципы:
- SRP: отвечает только за представление; байты результата декодирует контроллер.
- Оба изображения вписываются в одну и ту же рамку, чтобы «шторка» и 2-up
  сравнивали одинаковые области независимо от размеров результата.
"""
from __future__ import annotations

from typing import Optional, Tuple

import customtkinter as ctk
import tkinter as tk
from PIL import Image, ImageTk

_GAP = 16


class ImageViewer(ctk.CTkFrame):
    """Канва с режимами «только результат», шторка и side-by-side."""
    def __init__(self, master: ctk.CTk | tk.Misc, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self._canvas = tk.Canvas(self, highlightthickness=0, bg=self._get_canvas_bg())
        self._canvas.grid(row=0, column=0, sticky="nsew")

        self._original_image: Optional[Image.Image] = None
        self._result_image: Optional[Image.Image] = None
        # ссылки держим, иначе Tk соберёт картинки сборщиком мусора
        self._tk_left: Optional[ImageTk.PhotoImage] = None
        self._tk_right: Optional[ImageTk.PhotoImage] = None

        # compare modes: "off" | "wipe" | "side_by_side"
        self._compare_mode: str = "off"
        self._wipe_ratio: float = 0.5

        self._canvas.bind("<Configure>", lambda _e: self._render())

    # ---- Public API ----
    def set_image(self, image: Optional[Image.Image]) -> None:
        """Новый исходник; прежний результат сбрасывается."""
        self._original_image = image
        self._result_image = None
        self._render()

    def set_result_image(self, image: Optional[Image.Image]) -> None:
        """Декодированный результат (или None, если он устарел)."""
        self._result_image = image
        self._render()

    def set_compare_mode(self, mode: str) -> None:
        """Устанавливает режим сравнения: 'Нет' | 'Шторка' | '2-up'."""
        mapping = {"Нет": "off", "Шторка": "wipe", "2-up": "side_by_side"}
        self._compare_mode = mapping.get(mode, "off")
        self._render()

    def set_wipe_percent(self, percent: int) -> None:
        self._wipe_ratio = max(0.0, min(1.0, percent / 100.0))
        if self._compare_mode == "wipe":
            self._render()

    # ---- Internals ----
    def _render(self) -> None:
        self._canvas.delete("all")
        if self._original_image is None:
            return

        canvas_w = max(1, int(self._canvas.winfo_width()))
        canvas_h = max(1, int(self._canvas.winfo_height()))
        side_by_side = self._compare_mode == "side_by_side" and self._result_image is not None
        box_w = (canvas_w - _GAP) // 2 if side_by_side else canvas_w
        box = self._fit_size(self._original_image.size, (max(1, box_w), canvas_h))

        before = self._original_image.resize(box, Image.Resampling.LANCZOS)
        after = None
        if self._result_image is not None:
            after = self._result_image.resize(box, Image.Resampling.LANCZOS)

        content_w = box[0] * 2 + _GAP if side_by_side else box[0]
        ox = (canvas_w - content_w) // 2
        oy = (canvas_h - box[1]) // 2

        if side_by_side and after is not None:
            self._tk_left = ImageTk.PhotoImage(before)
            self._tk_right = ImageTk.PhotoImage(after)
            self._canvas.create_image(ox, oy, image=self._tk_left, anchor="nw")
            self._canvas.create_image(ox + box[0] + _GAP, oy, image=self._tk_right, anchor="nw")
        elif self._compare_mode == "wipe" and after is not None:
            split = int(round(box[0] * self._wipe_ratio))
            self._tk_left = ImageTk.PhotoImage(before.crop((0, 0, split, box[1])))
            self._tk_right = ImageTk.PhotoImage(after.crop((split, 0, box[0], box[1])))
            self._canvas.create_image(ox, oy, image=self._tk_left, anchor="nw")
            self._canvas.create_image(ox + split, oy, image=self._tk_right, anchor="nw")
            self._canvas.create_line(ox + split, oy, ox + split, oy + box[1], fill="#ff5050", width=2)
        else:
            self._tk_left = ImageTk.PhotoImage(after if after is not None else before)
            self._tk_right = None
            self._canvas.create_image(ox, oy, image=self._tk_left, anchor="nw")

    @staticmethod
    def _fit_size(size: Tuple[int, int], box: Tuple[int, int]) -> Tuple[int, int]:
        img_w, img_h = size
        if img_w == 0 or img_h == 0:
            return 1, 1
        scale = min(box[0] / img_w, box[1] / img_h, 4.0)
        return max(1, int(img_w * scale)), max(1, int(img_h * scale))

    def _get_canvas_bg(self) -> str:
        # CTk does not expose canvas theme, so pick neutral
        return "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f2f2f2"
