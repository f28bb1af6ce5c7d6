"""Загрузка изображений с диска и упаковка метаданных.

Принципы:
- SRP: класс отвечает только за загрузку и базовое извлечение свойств.
- LSP/ISP: возвращает `ImageData` с предсказуемыми полями; интерфейс узкий и конкретный.
"""
from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from resizer.exceptions import ImageLoadError
from resizer.models.image_model import ImageData, ImageDescriptor

logger = logging.getLogger(__name__)

IMAGE_FILETYPES = (
    ("Images", "*.png *.jpg *.jpeg *.bmp *.gif *.tiff *.webp"),
    ("All files", "*.*"),
)


class ImageService:
    def load_image(self, file_path: str | Path) -> ImageData:
        """Загружает изображение с диска и возвращает его вместе с метаданными.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `ImageData` c декодированным `PIL.Image.Image` (ориентация по EXIF
            применена) и `ImageDescriptor` (размеры и размер файла).

        Raises:
            ImageLoadError: путь не существует, не файл или не изображение.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise ImageLoadError(f"Файл не найден: {path}")

        try:
            with Image.open(path) as opened:
                pil_image = ImageOps.exif_transpose(opened)
                pil_image.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise ImageLoadError(f"Файл не является изображением: {path}") from exc

        try:
            size_bytes = path.stat().st_size
        except OSError:
            logger.warning("Не удалось прочитать размер файла %s", path)
            size_bytes = 0

        width, height = pil_image.size
        logger.info("Загружено %s: %dx%d, %s, %d Б", path.name, width, height, pil_image.mode, size_bytes)
        return ImageData(
            path=path,
            pil_image=pil_image,
            mode=pil_image.mode,
            descriptor=ImageDescriptor(width=width, height=height, size_bytes=size_bytes),
        )
