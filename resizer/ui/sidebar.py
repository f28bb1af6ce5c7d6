"""Боковая панель: очередь файлов, информация и параметры ресайза.

Принципы:
- SRP: управляет только виджетами; пересчёт настроек — в контроллере/сервисах.
- ISP: наружу отдаёт правки (`WidthEdit`, `QualityEdit`, ...) через `on_edit`,
  остальные события — через компактные `on_*`.
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence

import customtkinter as ctk

from resizer.models.entry_model import ImageEntry
from resizer.models.settings_model import (
    SUPPORTED_FORMATS,
    FormatEdit,
    HeightEdit,
    LockToggle,
    PercentageEdit,
    QualityEdit,
    ResizeSettings,
    SettingsEdit,
    TargetSizeEdit,
    WidthEdit,
)
from resizer.services.export_service import format_size


class Sidebar(ctk.CTkFrame):
    """Панель инструментов с блоками: файлы, информация, размеры, формат, действия."""
    def __init__(self, master: ctk.CTk, min_percentage: int = 10, max_percentage: int = 200, **kwargs) -> None:
        super().__init__(master, width=300, **kwargs)

        self.grid_columnconfigure(0, weight=1)

        # Callbacks
        self.on_open_file: Optional[Callable[[], None]] = None
        self.on_select_entry: Optional[Callable[[int], None]] = None
        self.on_close_entry: Optional[Callable[[], None]] = None
        self.on_edit: Optional[Callable[[SettingsEdit], None]] = None
        self.on_preview: Optional[Callable[[], None]] = None
        self.on_save: Optional[Callable[[], None]] = None

        # Files
        self._title = ctk.CTkLabel(self, text="Файлы", font=ctk.CTkFont(size=16, weight="bold"))
        self._title.grid(row=0, column=0, padx=8, pady=(8, 4), sticky="w")

        self._open_btn = ctk.CTkButton(self, text="Открыть изображения…", command=self._emit_open_file)
        self._open_btn.grid(row=1, column=0, padx=8, pady=(0, 6), sticky="ew")

        self._queue_frame = ctk.CTkScrollableFrame(self, height=96)
        self._queue_frame.grid(row=2, column=0, padx=8, pady=(0, 4), sticky="ew")
        self._queue_frame.grid_columnconfigure(0, weight=1)
        self._queue_buttons: list[ctk.CTkButton] = []

        self._close_btn = ctk.CTkButton(self, text="Закрыть текущее", fg_color="gray40", command=self._emit_close)
        self._close_btn.grid(row=3, column=0, padx=8, pady=(0, 10), sticky="ew")

        # Info
        self._info_title = ctk.CTkLabel(self, text="Исходник", font=ctk.CTkFont(size=16, weight="bold"))
        self._info_title.grid(row=4, column=0, padx=8, pady=(4, 2), sticky="w")
        self._name_val = ctk.StringVar(value="—")
        self._orig_val = ctk.StringVar(value="—")
        ctk.CTkLabel(self, textvariable=self._name_val, wraplength=270, anchor="w", justify="left").grid(
            row=5, column=0, padx=8, pady=(0, 2), sticky="ew"
        )
        ctk.CTkLabel(self, textvariable=self._orig_val, anchor="w", justify="left").grid(
            row=6, column=0, padx=8, pady=(0, 8), sticky="ew"
        )

        # Dimensions
        self._dims_title = ctk.CTkLabel(self, text="Размеры", font=ctk.CTkFont(size=16, weight="bold"))
        self._dims_title.grid(row=7, column=0, padx=8, pady=(4, 2), sticky="w")

        dims = ctk.CTkFrame(self, fg_color="transparent")
        dims.grid(row=8, column=0, padx=8, pady=(0, 4), sticky="ew")
        dims.grid_columnconfigure((0, 2), weight=1)
        ctk.CTkLabel(dims, text="Ширина, px").grid(row=0, column=0, sticky="w")
        ctk.CTkLabel(dims, text="Высота, px").grid(row=0, column=2, sticky="w")
        self._width_val = ctk.StringVar(value="")
        self._height_val = ctk.StringVar(value="")
        self._width_entry = ctk.CTkEntry(dims, textvariable=self._width_val, width=90)
        self._height_entry = ctk.CTkEntry(dims, textvariable=self._height_val, width=90)
        self._width_entry.grid(row=1, column=0, sticky="ew")
        self._height_entry.grid(row=1, column=2, sticky="ew")
        self._lock_val = ctk.BooleanVar(value=True)
        self._lock_switch = ctk.CTkSwitch(dims, text="🔒", variable=self._lock_val, width=50, command=self._on_lock_toggle)
        self._lock_switch.grid(row=1, column=1, padx=6)
        for widget, handler in ((self._width_entry, self._on_width_commit), (self._height_entry, self._on_height_commit)):
            widget.bind("<Return>", handler)
            widget.bind("<FocusOut>", handler)

        self._pct_label_val = ctk.StringVar(value="Масштаб: 100%")
        ctk.CTkLabel(self, textvariable=self._pct_label_val, anchor="w").grid(row=9, column=0, padx=8, sticky="w")
        self._pct_slider = ctk.CTkSlider(
            self,
            from_=min_percentage,
            to=max_percentage,
            number_of_steps=max(1, max_percentage - min_percentage),
            command=self._on_percentage_change,
        )
        self._pct_slider.set(100)
        self._pct_slider.grid(row=10, column=0, padx=8, pady=(0, 8), sticky="ew")

        # Format & quality
        self._fmt_title = ctk.CTkLabel(self, text="Формат", font=ctk.CTkFont(size=16, weight="bold"))
        self._fmt_title.grid(row=11, column=0, padx=8, pady=(4, 2), sticky="w")
        self._format_menu = ctk.CTkOptionMenu(self, values=list(SUPPORTED_FORMATS), command=self._on_format_change)
        self._format_menu.set("JPEG")
        self._format_menu.grid(row=12, column=0, padx=8, pady=(0, 4), sticky="ew")

        self._quality_label_val = ctk.StringVar(value="Качество: 80")
        ctk.CTkLabel(self, textvariable=self._quality_label_val, anchor="w").grid(row=13, column=0, padx=8, sticky="w")
        self._quality_slider = ctk.CTkSlider(self, from_=0, to=100, number_of_steps=100, command=self._on_quality_change)
        self._quality_slider.set(80)
        self._quality_slider.grid(row=14, column=0, padx=8, pady=(0, 4), sticky="ew")

        ctk.CTkLabel(self, text="Целевой размер, КБ (пусто — без подбора)", anchor="w").grid(
            row=15, column=0, padx=8, pady=(4, 0), sticky="w"
        )
        self._target_val = ctk.StringVar(value="")
        self._target_entry = ctk.CTkEntry(self, textvariable=self._target_val)
        self._target_entry.grid(row=16, column=0, padx=8, pady=(0, 10), sticky="ew")
        self._target_entry.bind("<Return>", self._on_target_commit)
        self._target_entry.bind("<FocusOut>", self._on_target_commit)

        # filler
        self.grid_rowconfigure(99, weight=1)

        # Actions
        self._preview_btn = ctk.CTkButton(self, text="Предпросмотр", command=self._emit_preview)
        self._preview_btn.grid(row=100, column=0, padx=8, pady=(0, 6), sticky="ew")
        self._save_btn = ctk.CTkButton(self, text="Сохранить…", command=self._emit_save)
        self._save_btn.grid(row=101, column=0, padx=8, pady=(0, 8), sticky="ew")

        self.set_enabled(False)

    # ---- Public API (sync from controller) ----
    def set_queue(self, names: Sequence[str], active_index: Optional[int]) -> None:
        """Перестраивает список файлов, выделяя активный."""
        for button in self._queue_buttons:
            button.destroy()
        self._queue_buttons = []
        for index, name in enumerate(names):
            button = ctk.CTkButton(
                self._queue_frame,
                text=name,
                anchor="w",
                fg_color=None if index == active_index else "transparent",
                command=lambda i=index: self._emit_select(i),
            )
            button.grid(row=index, column=0, pady=1, sticky="ew")
            self._queue_buttons.append(button)

    def set_image_info(self, entry: Optional[ImageEntry]) -> None:
        if entry is None:
            self._name_val.set("—")
            self._orig_val.set("—")
            self.set_enabled(False)
            return
        self._name_val.set(entry.name)
        self._orig_val.set(f"{entry.image.width} × {entry.image.height} px, {format_size(entry.image.size_bytes)}")
        self.set_enabled(True)

    def set_settings(self, settings: ResizeSettings) -> None:
        """Показывает согласованные настройки; события при этом не генерируются."""
        self._width_val.set(str(settings.width))
        self._height_val.set(str(settings.height))
        self._lock_val.set(settings.is_locked)
        self._pct_slider.set(settings.percentage)
        self._pct_label_val.set(f"Масштаб: {settings.percentage}%")
        self._format_menu.set(settings.format)
        quality = int(round(settings.quality * 100))
        self._quality_slider.set(quality)
        self._quality_label_val.set(
            "Качество: не используется (PNG)" if settings.format == "PNG" else f"Качество: {quality}"
        )
        self._target_val.set("" if settings.target_size is None else f"{settings.target_size:g}")

    def set_enabled(self, enabled: bool) -> None:
        state = "normal" if enabled else "disabled"
        for widget in (
            self._close_btn,
            self._width_entry,
            self._height_entry,
            self._lock_switch,
            self._pct_slider,
            self._format_menu,
            self._quality_slider,
            self._target_entry,
            self._preview_btn,
            self._save_btn,
        ):
            widget.configure(state=state)

    def set_busy(self, busy: bool) -> None:
        self._preview_btn.configure(text="Обработка…" if busy else "Предпросмотр")

    # ---- Events ----
    def _emit(self, edit: SettingsEdit) -> None:
        if self.on_edit:
            self.on_edit(edit)

    def _emit_open_file(self) -> None:
        if self.on_open_file:
            self.on_open_file()

    def _emit_select(self, index: int) -> None:
        if self.on_select_entry:
            self.on_select_entry(index)

    def _emit_close(self) -> None:
        if self.on_close_entry:
            self.on_close_entry()

    def _emit_preview(self) -> None:
        if self.on_preview:
            self.on_preview()

    def _emit_save(self) -> None:
        if self.on_save:
            self.on_save()

    # Текст передаётся как есть: неверный ввод отклоняет согласование
    def _on_width_commit(self, _event: object) -> None:
        self._emit(WidthEdit(_parse_number(self._width_val.get())))

    def _on_height_commit(self, _event: object) -> None:
        self._emit(HeightEdit(_parse_number(self._height_val.get())))

    def _on_lock_toggle(self) -> None:
        self._emit(LockToggle(bool(self._lock_val.get())))

    def _on_percentage_change(self, value: float) -> None:
        percent = int(round(value))
        self._pct_label_val.set(f"Масштаб: {percent}%")
        self._emit(PercentageEdit(percent))

    def _on_format_change(self, value: str) -> None:
        self._emit(FormatEdit(value))

    def _on_quality_change(self, value: float) -> None:
        quality = int(round(value))
        self._quality_label_val.set(f"Качество: {quality}")
        self._emit(QualityEdit(quality / 100.0))

    def _on_target_commit(self, _event: object) -> None:
        text = self._target_val.get().strip()
        self._emit(TargetSizeEdit(None if not text else _parse_number(text)))


def _parse_number(text: str) -> float:
    try:
        return float(text.strip().replace(",", "."))
    except ValueError:
        return float("nan")
