from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk


class BottomBar(ctk.CTkFrame):
    """Строка состояния: результат кодирования, прогресс подбора, режим сравнения."""
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, height=56, **kwargs)

        # callbacks
        self.on_compare_mode_change: Optional[Callable[[str], None]] = None
        self.on_wipe_change: Optional[Callable[[int], None]] = None

        # layout
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)  # status stretches

        self._status_val = ctk.StringVar(value="Откройте изображение")
        self._status_label = ctk.CTkLabel(self, textvariable=self._status_val, anchor="w")
        self._status_label.grid(row=0, column=0, padx=(10, 6), pady=8, sticky="ew")

        self._progress = ctk.CTkProgressBar(self, width=140)
        self._progress.set(0)
        self._progress.grid(row=0, column=1, padx=6, pady=8)
        self._progress.grid_remove()

        self._compare_menu = ctk.CTkOptionMenu(
            self, values=["Нет", "Шторка", "2-up"], command=self._on_compare_mode
        )
        self._compare_menu.set("Нет")
        self._compare_menu.grid(row=0, column=2, padx=6, pady=8, sticky="e")

        # Wipe slider (hidden by default)
        self._wipe_slider = ctk.CTkSlider(self, from_=0, to=100, number_of_steps=100, width=140, command=self._on_wipe_slider)
        self._wipe_slider.set(50)
        self._toggle_wipe_controls(visible=False)

    # public API (sync from controller)
    def set_status(self, text: str, is_error: bool = False) -> None:
        self._status_val.set(text)
        self._status_label.configure(text_color="#d9534f" if is_error else ("gray10", "gray90"))

    def set_progress(self, fraction: Optional[float]) -> None:
        """Доля выполненных проб подбора; None скрывает индикатор."""
        if fraction is None:
            self._progress.grid_remove()
            return
        self._progress.grid()
        self._progress.set(max(0.0, min(1.0, fraction)))

    # events
    def _on_compare_mode(self, value: str) -> None:
        self._toggle_wipe_controls(visible=(value == "Шторка"))
        if self.on_compare_mode_change:
            self.on_compare_mode_change(value)

    def _on_wipe_slider(self, value: float) -> None:
        if self.on_wipe_change:
            self.on_wipe_change(int(round(value)))

    # helpers
    def _toggle_wipe_controls(self, visible: bool) -> None:
        if visible:
            self._wipe_slider.grid(row=0, column=3, padx=(0, 10), pady=8, sticky="e")
        else:
            self._wipe_slider.grid_remove()
