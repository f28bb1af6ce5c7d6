"""Настройки ресайза и правки пользователя.

Принципы:
- Настройки — неизменяемое значение: каждая правка даёт новый объект.
- Правка — явный вариант (`WidthEdit | HeightEdit | ...`), а не набор
  необязательных полей: какое поле «ведущее», видно по типу.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Literal, Optional, Union

from resizer.exceptions import InvalidSettings

ImageFormat = Literal["JPEG", "PNG", "WebP"]
SUPPORTED_FORMATS: tuple[str, ...] = ("JPEG", "PNG", "WebP")
LOSSY_FORMATS: tuple[str, ...] = ("JPEG", "WebP")

FILE_EXTENSIONS = {"JPEG": "jpeg", "PNG": "png", "WebP": "webp"}


@dataclass(frozen=True)
class ResizeSettings:
    """Полностью согласованные настройки одного изображения.

    Fields:
        width: Целевая ширина, px.
        height: Целевая высота, px.
        is_locked: Сохранять пропорции исходника при правке ширины/высоты.
        percentage: Ширина относительно исходной, %.
        format: "JPEG" | "PNG" | "WebP".
        quality: Качество кодировщика в [0, 1]; PNG его игнорирует.
        target_size: Желаемый размер результата, КБ; None: без подбора.
    """
    width: int
    height: int
    is_locked: bool = True
    percentage: int = 100
    format: ImageFormat = "JPEG"
    quality: float = 0.8
    target_size: Optional[float] = None

    @property
    def dimensions(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def target_bytes(self) -> Optional[int]:
        """Бюджет в байтах, если задан положительный целевой размер."""
        if self.target_size is None or not math.isfinite(self.target_size) or self.target_size <= 0:
            return None
        return int(self.target_size * 1024)

    def with_changes(self, **changes) -> "ResizeSettings":
        return replace(self, **changes)

    def validate(self) -> None:
        """Проверка перед кодированием.

        Raises:
            InvalidSettings: размеры не положительные или формат неизвестен.
        """
        if self.width <= 0 or self.height <= 0:
            raise InvalidSettings(f"Недопустимые размеры: {self.width}x{self.height}")
        if self.format not in SUPPORTED_FORMATS:
            raise InvalidSettings(f"Неподдерживаемый формат: {self.format}")

    @classmethod
    def initial(
        cls,
        width: int,
        height: int,
        *,
        format: ImageFormat = "JPEG",
        quality: float = 0.8,
        is_locked: bool = True,
    ) -> "ResizeSettings":
        """Настройки только что открытого изображения: 100 %, без целевого размера."""
        return cls(
            width=width,
            height=height,
            is_locked=is_locked,
            percentage=100,
            format=format,
            quality=quality,
            target_size=None,
        )


# ---- Правки ----
@dataclass(frozen=True)
class WidthEdit:
    width: float


@dataclass(frozen=True)
class HeightEdit:
    height: float


@dataclass(frozen=True)
class PercentageEdit:
    percentage: float


@dataclass(frozen=True)
class LockToggle:
    is_locked: bool


@dataclass(frozen=True)
class TargetSizeEdit:
    # None или <= 0 снимает целевой размер
    target_size: Optional[float]


@dataclass(frozen=True)
class FormatEdit:
    format: str


@dataclass(frozen=True)
class QualityEdit:
    quality: float


SettingsEdit = Union[
    WidthEdit,
    HeightEdit,
    PercentageEdit,
    LockToggle,
    TargetSizeEdit,
    FormatEdit,
    QualityEdit,
]
