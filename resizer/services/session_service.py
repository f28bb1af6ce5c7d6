"""Очередь открытых изображений и жизненный цикл кодирования.

Принципы:
- SRP: здесь только состояние очереди; расчёты делегируются
  `SettingsReconciler` и `EncodeService`.
- Любая смена настроек делает результат устаревшим и увеличивает ревизию;
  кодирование, запущенное на старой ревизии, по завершении отбрасывается.
- Все изменения состояния идут из одного (UI) потока; в рабочем потоке
  выполняется только `run()`, который трогает лишь неизменяемое задание.
"""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from PIL import Image

from resizer.config import ResizerConfig, get_config
from resizer.models.entry_model import ImageEntry
from resizer.models.image_model import ImageData
from resizer.models.result_model import EncodeResult
from resizer.models.settings_model import ResizeSettings, SettingsEdit
from resizer.services.encode_service import EncodeService, ProbeCallback
from resizer.services.reconcile_service import SettingsReconciler

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class EncodeJob:
    """Снимок того, что кодировать: настройки и ревизия на момент запуска."""
    entry_id: str
    revision: int
    settings: ResizeSettings
    pixels: Image.Image


class ResizeSession:
    def __init__(
        self,
        reconciler: Optional[SettingsReconciler] = None,
        encoder: Optional[EncodeService] = None,
        config: Optional[ResizerConfig] = None,
    ) -> None:
        self.config = config or get_config()
        self.reconciler = reconciler or SettingsReconciler.from_config(self.config)
        self.encoder = encoder or EncodeService.from_config(self.config)
        self.entries: List[ImageEntry] = []
        self.active_index: Optional[int] = None
        self._ids = itertools.count(1)
        # entry_id -> ревизия последнего запущенного кодирования
        self._in_flight: Dict[str, int] = {}
        # entry_id -> ревизия, результат которой ждёт диалог сохранения
        self._pending_saves: Dict[str, int] = {}

    # ---- Очередь ----
    @property
    def active(self) -> Optional[ImageEntry]:
        if self.active_index is None:
            return None
        return self.entries[self.active_index]

    def add_image(self, image: ImageData) -> ImageEntry:
        """Ставит изображение в очередь с настройками по умолчанию."""
        settings = ResizeSettings.initial(
            image.width,
            image.height,
            format=self.config.default_format,
            quality=self.config.default_quality,
            is_locked=self.config.default_locked,
        )
        entry = ImageEntry(entry_id=f"{image.path.name}-{next(self._ids)}", image=image, settings=settings)
        self.entries.append(entry)
        if self.active_index is None:
            self.active_index = 0
        return entry

    def select(self, index: int) -> Optional[ImageEntry]:
        if 0 <= index < len(self.entries):
            self.active_index = index
        return self.active

    def close_active(self) -> Optional[ImageEntry]:
        """Убирает активное изображение; выбор переходит на последнее, если закрыли хвост."""
        if self.active_index is None:
            return None
        removed = self.entries.pop(self.active_index)
        self._in_flight.pop(removed.entry_id, None)
        self._pending_saves.pop(removed.entry_id, None)
        if not self.entries:
            self.active_index = None
        elif self.active_index >= len(self.entries):
            self.active_index = len(self.entries) - 1
        return removed

    def find(self, entry_id: str) -> Optional[ImageEntry]:
        for entry in self.entries:
            if entry.entry_id == entry_id:
                return entry
        return None

    # ---- Настройки ----
    def apply_edit(self, edit: SettingsEdit, entry: Optional[ImageEntry] = None) -> Optional[ResizeSettings]:
        """Согласует правку для `entry` (по умолчанию активного) и сбрасывает результат."""
        entry = entry or self.active
        if entry is None:
            return None
        descriptor = entry.image.descriptor
        updated = self.reconciler.reconcile(
            entry.settings,
            (descriptor.width, descriptor.height),
            descriptor.size_bytes,
            edit,
        )
        if updated == entry.settings:
            return entry.settings
        entry.settings = updated
        entry.result = None
        entry.error = None
        entry.revision += 1
        self._pending_saves.pop(entry.entry_id, None)
        entry.status = "encoding" if entry.entry_id in self._in_flight else "idle"
        return updated

    # ---- Кодирование ----
    def begin_encode(self, entry: Optional[ImageEntry] = None) -> Optional[EncodeJob]:
        """Готовит задание; None, если для этой ревизии кодирование уже идёт."""
        entry = entry or self.active
        if entry is None:
            return None
        if self._in_flight.get(entry.entry_id) == entry.revision:
            return None
        self._in_flight[entry.entry_id] = entry.revision
        entry.status = "encoding"
        return EncodeJob(
            entry_id=entry.entry_id,
            revision=entry.revision,
            settings=entry.settings,
            pixels=entry.image.pil_image,
        )

    def request_save(self, entry: Optional[ImageEntry] = None) -> Optional[EncodeJob]:
        """Запоминает, что результат текущей ревизии нужно сохранить.

        Возвращает новое задание или None, если кодирование этой ревизии уже
        идёт: тогда сохранение произойдёт по его завершении.
        """
        entry = entry or self.active
        if entry is None:
            return None
        self._pending_saves[entry.entry_id] = entry.revision
        return self.begin_encode(entry)

    def take_save_request(self, job: EncodeJob) -> bool:
        """True и снятие запроса, если результат `job` ждёт сохранения."""
        if self._pending_saves.get(job.entry_id) != job.revision:
            return False
        del self._pending_saves[job.entry_id]
        return True

    def run(self, job: EncodeJob, on_probe: Optional[ProbeCallback] = None) -> EncodeResult:
        """Долгая часть; может выполняться в рабочем потоке."""
        return self.encoder.encode(job.pixels, job.settings, on_probe=on_probe)

    def complete_encode(self, job: EncodeJob, result: EncodeResult) -> bool:
        """Принимает результат, если настройки с момента запуска не менялись."""
        entry = self._settle(job)
        if entry is None or entry.revision != job.revision:
            logger.info("Результат для %s устарел (ревизия %d), отброшен", job.entry_id, job.revision)
            return False
        entry.result = result
        entry.status = "ready"
        entry.error = None
        return True

    def fail_encode(self, job: EncodeJob, error: Exception) -> bool:
        """Фиксирует ошибку; настройки и прежний результат не трогаются."""
        entry = self._settle(job)
        if entry is None or entry.revision != job.revision:
            return False
        logger.error("Кодирование %s не удалось: %s", job.entry_id, error)
        self._pending_saves.pop(job.entry_id, None)
        entry.status = "failed"
        entry.error = str(error)
        return True

    def _settle(self, job: EncodeJob) -> Optional[ImageEntry]:
        entry = self.find(job.entry_id)
        if self._in_flight.get(job.entry_id) == job.revision:
            del self._in_flight[job.entry_id]
            if entry is not None and entry.revision != job.revision:
                entry.status = "idle"
        return entry
