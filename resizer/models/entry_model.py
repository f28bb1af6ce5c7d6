"""Элемент очереди изображений: исходник, настройки и последний результат."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from resizer.models.image_model import ImageData
from resizer.models.result_model import EncodeResult
from resizer.models.settings_model import ResizeSettings

EntryStatus = Literal["idle", "encoding", "ready", "failed"]


@dataclass
class ImageEntry:
    """Изменяемое состояние одного открытого изображения.

    `revision` растёт при каждой смене настроек; результат кодирования,
    запущенного на старой ревизии, отбрасывается.
    """
    entry_id: str
    image: ImageData
    settings: ResizeSettings
    result: Optional[EncodeResult] = None
    status: EntryStatus = "idle"
    error: Optional[str] = None
    revision: int = 0

    @property
    def name(self) -> str:
        return self.image.path.name

    @property
    def is_encoding(self) -> bool:
        return self.status == "encoding"
