"""Модели данных для загруженных изображений.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PIL import Image


@dataclass(frozen=True)
class ImageDescriptor:
    """Неизменяемое описание исходника: всё, что нужно для пересчёта настроек.

    Fields:
        width: Исходная ширина, px.
        height: Исходная высота, px.
        size_bytes: Размер исходного файла, байт.
    """
    width: int
    height: int
    size_bytes: int

    @property
    def aspect_ratio(self) -> float | None:
        """Отношение ширины к высоте; None, если одна из сторон нулевая."""
        if self.width <= 0 or self.height <= 0:
            return None
        return self.width / self.height


@dataclass(frozen=True)
class ImageData:
    """Неизменяемая модель изображения и его метаданные.

    Fields:
        path: Путь к исходному файлу.
        pil_image: Декодированное изображение PIL (ориентация по EXIF уже применена).
        mode: Режим PIL, например "RGBA".
        descriptor: Размеры и размер файла.
    """
    path: Path
    pil_image: Image.Image
    mode: str
    descriptor: ImageDescriptor

    @property
    def width(self) -> int:
        return self.descriptor.width

    @property
    def height(self) -> int:
        return self.descriptor.height

    @property
    def size_bytes(self) -> int:
        return self.descriptor.size_bytes
