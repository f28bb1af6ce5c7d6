"""Контроллер приложения: оркестрация UI и сервисов.

SOLID:
- SRP: класс управляет связями между UI и сервисами (без логики ресайза).
- DIP: состояние очереди и кодирование инкапсулированы в `ResizeSession`.
Потоки:
- Кодирование идёт в рабочем потоке; результаты возвращаются через очередь,
  которую UI-поток опрашивает по `after()`. Состояние сессии меняется только
  из UI-потока.
"""
from __future__ import annotations

import io
import logging
import queue
import threading
from dataclasses import dataclass, field
from tkinter import filedialog, TclError
from typing import Optional, Tuple

import customtkinter as ctk
from PIL import Image

from resizer.exceptions import ImageLoadError, ResizerError
from resizer.models.entry_model import ImageEntry
from resizer.models.result_model import EncodeResult
from resizer.models.settings_model import FILE_EXTENSIONS, SettingsEdit
from resizer.services.export_service import ExportService, describe_result, format_size
from resizer.services.image_service import IMAGE_FILETYPES, ImageService
from resizer.services.session_service import EncodeJob, ResizeSession
from resizer.ui.bottom_bar import BottomBar
from resizer.ui.image_viewer import ImageViewer
from resizer.ui.sidebar import Sidebar

logger = logging.getLogger(__name__)

_POLL_MS = 50


@dataclass
class AppController:
    """Связывает элементы UI с прикладной логикой.

    Ответственности:
    - Инициализация и бинд событий (UI -> контроллер).
    - Загрузка изображений через `ImageService`.
    - Правки настроек и кодирование через `ResizeSession`.
    - Сохранение результата через `ExportService`.
    """
    viewer: ImageViewer
    sidebar: Sidebar
    bottom: BottomBar
    window: ctk.CTk
    session: ResizeSession

    _image_service: ImageService = field(default_factory=ImageService)
    _export_service: ExportService = field(default_factory=ExportService)
    _messages: "queue.Queue[Tuple[str, EncodeJob, object]]" = field(default_factory=queue.Queue)
    _workers: int = 0

    def bind_events(self) -> None:
        """Регистрирует обработчики событий между UI-компонентами."""
        self.sidebar.on_open_file = self._handle_open_file
        self.sidebar.on_select_entry = self._handle_select_entry
        self.sidebar.on_close_entry = self._handle_close_entry
        self.sidebar.on_edit = self._handle_edit
        self.sidebar.on_preview = self._handle_preview
        self.sidebar.on_save = self._handle_save

        self.bottom.on_compare_mode_change = self.viewer.set_compare_mode
        self.bottom.on_wipe_change = self.viewer.set_wipe_percent

    # ---- Handlers ----
    def _handle_open_file(self) -> None:
        try:
            file_paths = filedialog.askopenfilenames(title="Выберите изображения", filetypes=IMAGE_FILETYPES)
        except TclError:
            # Silent fail if dialog cannot open
            return

        for file_path in file_paths or ():
            try:
                image_data = self._image_service.load_image(file_path)
            except ImageLoadError as exc:
                logger.warning("%s", exc)
                self.bottom.set_status(str(exc), is_error=True)
                continue
            self.session.add_image(image_data)
        self._refresh_all()

    def _handle_select_entry(self, index: int) -> None:
        self.session.select(index)
        self._refresh_all()

    def _handle_close_entry(self) -> None:
        self.session.close_active()
        self._refresh_all()

    def _handle_edit(self, edit: SettingsEdit) -> None:
        entry = self.session.active
        if entry is None:
            return
        before = entry.settings
        settings = self.session.apply_edit(edit, entry)
        # показываем согласованные значения, в том числе после отклонённого ввода
        self.sidebar.set_settings(settings)
        if settings != before:
            self.viewer.set_result_image(None)
            self._refresh_status(entry)

    def _handle_preview(self) -> None:
        entry = self.session.active
        if entry is not None:
            self._start_encode(self.session.begin_encode(entry))

    def _handle_save(self) -> None:
        entry = self.session.active
        if entry is None:
            return
        if entry.result is None:
            # диалог откроется, когда закончится кодирование этой ревизии
            self._start_encode(self.session.request_save(entry))
            if entry.is_encoding:
                self.bottom.set_status("Кодирование… файл будет сохранён по готовности")
            return
        self._save_result(entry, entry.result)

    # ---- Encoding ----
    def _start_encode(self, job: Optional[EncodeJob]) -> None:
        if job is None:
            return
        total = self.session.encoder.iterations if self.session.encoder.uses_search(job.settings) else 0
        self.sidebar.set_busy(True)
        self.bottom.set_status("Кодирование…")
        self.bottom.set_progress(0.0 if total else None)

        def on_probe(iteration: int, _quality: float, _size: int, _fits: bool) -> None:
            self._messages.put(("probe", job, (iteration + 1) / total))

        def work() -> None:
            try:
                result = self.session.run(job, on_probe=on_probe if total else None)
            except ResizerError as exc:
                self._messages.put(("error", job, exc))
            except Exception as exc:
                logger.exception("Неожиданная ошибка кодирования %s", job.entry_id)
                self._messages.put(("error", job, exc))
            else:
                self._messages.put(("done", job, result))

        self._workers += 1
        threading.Thread(target=work, daemon=True).start()
        if self._workers == 1:
            self.window.after(_POLL_MS, self._poll_messages)

    def _poll_messages(self) -> None:
        try:
            while True:
                kind, job, payload = self._messages.get_nowait()
                if kind == "probe":
                    self.bottom.set_progress(payload)  # type: ignore[arg-type]
                elif kind == "done":
                    self._workers -= 1
                    self._finish_job(job, payload)  # type: ignore[arg-type]
                elif kind == "error":
                    self._workers -= 1
                    self._fail_job(job, payload)  # type: ignore[arg-type]
        except queue.Empty:
            pass
        finally:
            if self._workers > 0:
                self.window.after(_POLL_MS, self._poll_messages)
            else:
                self.bottom.set_progress(None)

    def _finish_job(self, job: EncodeJob, result: EncodeResult) -> None:
        accepted = self.session.complete_encode(job, result)
        entry = self.session.find(job.entry_id)
        if entry is None:
            return
        if entry is self.session.active:
            self.sidebar.set_busy(entry.is_encoding)
            self._refresh_status(entry)
            if accepted:
                self.viewer.set_result_image(self._decode(result))
        if accepted and self.session.take_save_request(job):
            self._save_result(entry, result)

    def _fail_job(self, job: EncodeJob, error: Exception) -> None:
        self.session.fail_encode(job, error)
        entry = self.session.find(job.entry_id)
        if entry is not None and entry is self.session.active:
            self.sidebar.set_busy(entry.is_encoding)
            self._refresh_status(entry)

    def _save_result(self, entry: ImageEntry, result: EncodeResult) -> None:
        extension = FILE_EXTENSIONS.get(result.format, "img")
        try:
            target = filedialog.asksaveasfilename(
                title="Сохранить результат",
                initialfile=self._export_service.suggest_filename(entry.name, result.format),
                defaultextension=f".{extension}",
                filetypes=((result.format, f"*.{extension}"), ("All files", "*.*")),
            )
        except TclError:
            return
        if not target:
            return
        try:
            path = self._export_service.save(result, target)
        except OSError as exc:
            logger.error("Не удалось сохранить %s: %s", target, exc)
            self.bottom.set_status(f"Не удалось сохранить: {exc}", is_error=True)
            return
        self.bottom.set_status(f"Сохранено: {path.name} ({format_size(result.size)})")

    # ---- Helpers ----
    def _refresh_all(self) -> None:
        entry = self.session.active
        self.sidebar.set_queue([e.name for e in self.session.entries], self.session.active_index)
        self.sidebar.set_image_info(entry)
        if entry is None:
            self.viewer.set_image(None)
            self.bottom.set_status("Откройте изображение")
            return
        self.sidebar.set_settings(entry.settings)
        self.sidebar.set_busy(entry.is_encoding)
        self.viewer.set_image(entry.image.pil_image)
        if entry.result is not None:
            self.viewer.set_result_image(self._decode(entry.result))
        self._refresh_status(entry)

    def _refresh_status(self, entry: ImageEntry) -> None:
        if entry.status == "failed":
            self.bottom.set_status(f"Ошибка кодирования: {entry.error}", is_error=True)
        elif entry.status == "encoding":
            self.bottom.set_status("Кодирование…")
        elif entry.result is not None:
            self.bottom.set_status(describe_result(entry.result), is_error=entry.result.target_met is False)
        else:
            s = entry.settings
            self.bottom.set_status(f"{s.width}×{s.height} ({s.percentage}%), {s.format} — нажмите «Предпросмотр»")

    @staticmethod
    def _decode(result: EncodeResult) -> Optional[Image.Image]:
        try:
            with Image.open(io.BytesIO(result.data)) as img:
                img.load()
                return img.copy()
        except OSError as exc:
            logger.warning("Не удалось декодировать результат для предпросмотра: %s", exc)
            return None
