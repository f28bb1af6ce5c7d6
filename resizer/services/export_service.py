"""Сохранение результата и форматирование размеров для UI."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from resizer.models.result_model import EncodeResult
from resizer.models.settings_model import FILE_EXTENSIONS

logger = logging.getLogger(__name__)


class ExportService:
    def suggest_filename(self, original_name: str, fmt: str) -> str:
        """`photo.png` + "JPEG" -> `photo_resized.jpeg`."""
        stem = Path(original_name).stem or original_name
        extension = FILE_EXTENSIONS.get(fmt, fmt.lower())
        return f"{stem}_resized.{extension}"

    def save(self, result: EncodeResult, target_path: str | Path) -> Path:
        path = Path(target_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(result.data)
        logger.info("Сохранено %s (%d Б)", path, result.size)
        return path


def describe_result(result: EncodeResult) -> str:
    """Строка состояния: размер, качество и, при подборе, попали ли в цель."""
    width, height = result.dimensions
    text = f"{result.format} {width}×{height}: {format_size(result.size)}"
    if result.format != "PNG":
        text += f", качество {int(round(result.quality * 100))}"
    if result.target_met is True:
        text += f" (цель {format_size(result.target_bytes)} достигнута)"
    elif result.target_met is False:
        text += f" (цель {format_size(result.target_bytes)} недостижима)"
    return text


def format_size(size_bytes: Optional[int]) -> str:
    """Размер в Б/КБ/МБ/ГБ с одним знаком после запятой."""
    if size_bytes is None:
        return "—"
    thresholds = [("Б", 1024), ("КБ", 1024**2), ("МБ", 1024**3), ("ГБ", 1024**4)]
    for label, limit in thresholds:
        if size_bytes < limit:
            if label == "Б":
                return f"{size_bytes} {label}"
            value = size_bytes / (limit // 1024)
            return f"{value:.1f} {label}"
    value = size_bytes / (1024**4)
    return f"{value:.1f} ТБ"
