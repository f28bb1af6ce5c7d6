"""Согласование настроек ресайза после правки пользователя.

Принципы:
- Чистая функция: на вход текущие настройки и одна правка, на выход новые
  настройки. Входной объект не меняется и не сохраняется.
- Одна правка — одно правило: тип правки определяет «ведущее» поле.
- Никаких исключений: неверный ввод отклоняется, прежние настройки остаются.

Политика ввода:
- ширина/высота/процент: нечисловое, не конечное или <= 0 значение отклоняется;
  принятые и вычисленные размеры округляются (0.5 вверх) и зажимаются в
  [1, max_dimension], процент правки в [1, max_percentage];
- качество: не конечное отклоняется, остальное зажимается в [0, 1];
- целевой размер: None или <= 0 снимает цель, не конечное отклоняется;
  коэффициент масштаба по цели ограничен max_percentage, а если ширину
  обрезал max_dimension, процент берётся от фактической ширины.
"""
from __future__ import annotations

import logging
import math
from typing import Mapping, Optional, Tuple

from resizer.config import ResizerConfig
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

logger = logging.getLogger(__name__)

# Порядок старшинства полей при разборе частичного набора изменений
_EDIT_PRECEDENCE = (
    ("width", WidthEdit),
    ("height", HeightEdit),
    ("percentage", PercentageEdit),
    ("is_locked", LockToggle),
    ("target_size", TargetSizeEdit),
    ("format", FormatEdit),
    ("quality", QualityEdit),
)

_FORMAT_ALIASES = {"jpeg": "JPEG", "jpg": "JPEG", "png": "PNG", "webp": "WebP"}


def round_half_up(value: float) -> int:
    """Округление к ближайшему целому, половина вверх (12.5 -> 13)."""
    return int(math.floor(value + 0.5))


def _to_number(value: object) -> Optional[float]:
    """Конечное число или None."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _to_positive(value: object) -> Optional[float]:
    number = _to_number(value)
    if number is None or number <= 0:
        return None
    return number


def _aspect_ratio(original: Tuple[int, int]) -> Optional[float]:
    width, height = original
    if width <= 0 or height <= 0:
        return None
    return width / height


def normalize_format(value: object) -> Optional[str]:
    if not isinstance(value, str):
        return None
    if value in SUPPORTED_FORMATS:
        return value
    return _FORMAT_ALIASES.get(value.strip().lower())


class SettingsReconciler:
    """Пересчитывает производные поля (высоту, ширину, процент) после правки."""

    def __init__(self, max_percentage: int = 200, max_dimension: int = 20000) -> None:
        self.max_percentage = max(1, int(max_percentage))
        self.max_dimension = max(1, int(max_dimension))

    @classmethod
    def from_config(cls, config: ResizerConfig) -> "SettingsReconciler":
        return cls(max_percentage=config.max_percentage, max_dimension=config.max_dimension)

    def reconcile(
        self,
        current: ResizeSettings,
        original: Tuple[int, int],
        original_byte_size: int,
        edit: SettingsEdit,
    ) -> ResizeSettings:
        """Применяет одну правку и возвращает полностью согласованные настройки.

        Args:
            current: Текущие согласованные настройки.
            original: (ширина, высота) исходника, px.
            original_byte_size: Размер исходного файла, байт.
            edit: Правка пользователя.

        Returns:
            Новый `ResizeSettings`; если правка ничего не меняет или отклонена,
            исходный объект.
        """
        if isinstance(edit, WidthEdit):
            return self._apply_width(current, original, edit.width)
        if isinstance(edit, HeightEdit):
            return self._apply_height(current, original, edit.height)
        if isinstance(edit, PercentageEdit):
            return self._apply_percentage(current, original, edit.percentage)
        if isinstance(edit, LockToggle):
            return self._apply_lock(current, original, edit.is_locked)
        if isinstance(edit, TargetSizeEdit):
            return self._apply_target_size(current, original, original_byte_size, edit.target_size)
        if isinstance(edit, FormatEdit):
            return self._apply_format(current, edit.format)
        if isinstance(edit, QualityEdit):
            return self._apply_quality(current, edit.quality)
        logger.warning("Неизвестная правка %r, настройки не изменены", edit)
        return current

    def reconcile_changes(
        self,
        current: ResizeSettings,
        original: Tuple[int, int],
        original_byte_size: int,
        changes: Mapping[str, object],
    ) -> ResizeSettings:
        """То же для частичного набора полей: выбирается одно ведущее поле."""
        edit = edit_from_changes(current, changes)
        if edit is None:
            return current
        return self.reconcile(current, original, original_byte_size, edit)

    # ---- Правила ----
    def _apply_width(self, current: ResizeSettings, original: Tuple[int, int], raw: object) -> ResizeSettings:
        value = _to_positive(raw)
        if value is None:
            logger.debug("Ширина %r отклонена", raw)
            return current
        width = self._clamp_dimension(value)
        if width == current.width:
            return current
        height = current.height
        ratio = _aspect_ratio(original)
        if current.is_locked and ratio is not None:
            height = self._clamp_dimension(width / ratio)
        return self._with_dimensions(current, original, width, height)

    def _apply_height(self, current: ResizeSettings, original: Tuple[int, int], raw: object) -> ResizeSettings:
        value = _to_positive(raw)
        if value is None:
            logger.debug("Высота %r отклонена", raw)
            return current
        height = self._clamp_dimension(value)
        if height == current.height:
            return current
        width = current.width
        ratio = _aspect_ratio(original)
        if current.is_locked and ratio is not None:
            width = self._clamp_dimension(height * ratio)
        return self._with_dimensions(current, original, width, height)

    def _apply_percentage(self, current: ResizeSettings, original: Tuple[int, int], raw: object) -> ResizeSettings:
        value = _to_positive(raw)
        if value is None:
            logger.debug("Процент %r отклонён", raw)
            return current
        percentage = max(1, min(self.max_percentage, round_half_up(value)))
        if percentage == current.percentage:
            return current
        orig_w, orig_h = original
        width = self._clamp_dimension(orig_w * percentage / 100)
        height = self._clamp_dimension(orig_h * percentage / 100)
        return self._with_dimensions(current, original, width, height)

    def _apply_lock(self, current: ResizeSettings, original: Tuple[int, int], raw: object) -> ResizeSettings:
        is_locked = bool(raw)
        if is_locked == current.is_locked:
            return current
        settings = current.with_changes(is_locked=is_locked)
        ratio = _aspect_ratio(original)
        if not is_locked or ratio is None:
            return settings
        # вернуть высоту в пропорцию исходника
        height = self._clamp_dimension(settings.width / ratio)
        return self._with_dimensions(settings, original, settings.width, height)

    def _apply_target_size(
        self,
        current: ResizeSettings,
        original: Tuple[int, int],
        original_byte_size: int,
        raw: object,
    ) -> ResizeSettings:
        if raw is None:
            target = None
        else:
            number = _to_number(raw)
            if number is None:
                logger.debug("Целевой размер %r отклонён", raw)
                return current
            target = number if number > 0 else None

        if target == current.target_size:
            return current
        settings = current.with_changes(target_size=target)
        if target is None:
            return settings

        size_ratio = self._size_ratio(target, original_byte_size)
        if size_ratio is None:
            logger.debug("Коэффициент для %s КБ не определён, размеры не меняются", target)
            return settings

        # масштаб по цели не выходит за ту же шкалу, что и правка процента
        size_ratio = min(size_ratio, self.max_percentage / 100)
        orig_w, orig_h = original
        width = self._clamp_dimension(orig_w * size_ratio)
        percentage = max(1, round_half_up(size_ratio * 100))
        if orig_w * size_ratio > self.max_dimension:
            percentage = self._percentage_of(width, orig_w)
        return settings.with_changes(
            width=width,
            height=self._clamp_dimension(orig_h * size_ratio),
            percentage=percentage,
        )

    def _apply_format(self, current: ResizeSettings, raw: object) -> ResizeSettings:
        fmt = normalize_format(raw)
        if fmt is None:
            logger.debug("Формат %r не поддерживается", raw)
            return current
        if fmt == current.format:
            return current
        return current.with_changes(format=fmt)

    def _apply_quality(self, current: ResizeSettings, raw: object) -> ResizeSettings:
        number = _to_number(raw)
        if number is None:
            logger.debug("Качество %r отклонено", raw)
            return current
        quality = max(0.0, min(1.0, number))
        if quality == current.quality:
            return current
        return current.with_changes(quality=quality)

    # ---- Helpers ----
    def _clamp_dimension(self, value: float) -> int:
        return max(1, min(self.max_dimension, round_half_up(value)))

    def _with_dimensions(
        self,
        current: ResizeSettings,
        original: Tuple[int, int],
        width: int,
        height: int,
    ) -> ResizeSettings:
        if width == current.width and height == current.height:
            return current
        return current.with_changes(
            width=width,
            height=height,
            percentage=self._percentage_of(width, original[0]),
        )

    @staticmethod
    def _percentage_of(width: int, original_width: int) -> int:
        if original_width <= 0:
            return 100
        percentage = width / original_width * 100
        if not math.isfinite(percentage):
            return 100
        return round_half_up(percentage)

    @staticmethod
    def _size_ratio(target_kb: float, original_byte_size: int) -> Optional[float]:
        """sqrt(цель / исходный размер): площадь кадра ~ размер файла."""
        original_kb = original_byte_size / 1024 if original_byte_size else 0.0
        if original_kb <= 0:
            return None
        ratio = math.sqrt(target_kb / original_kb)
        if not math.isfinite(ratio) or ratio <= 0:
            return None
        return ratio


def edit_from_changes(current: ResizeSettings, changes: Mapping[str, object]) -> Optional[SettingsEdit]:
    """Превращает частичный набор полей из UI в одну правку.

    Поля, совпадающие с текущими значениями, пропускаются; из оставшихся
    берётся старшее по порядку width > height > percentage > is_locked >
    target_size > format > quality. Остальные игнорируются.
    """
    picked: Optional[SettingsEdit] = None
    ignored = []
    for key, edit_type in _EDIT_PRECEDENCE:
        if key not in changes:
            continue
        value = changes[key]
        if value == getattr(current, key):
            continue
        if picked is None:
            picked = edit_type(value)
        else:
            ignored.append(key)
    unknown = sorted(set(changes) - {key for key, _ in _EDIT_PRECEDENCE})
    if ignored or unknown:
        logger.warning("Поля проигнорированы: %s", ", ".join(ignored + unknown))
    return picked


def reconcile(
    current: ResizeSettings,
    original: Tuple[int, int],
    original_byte_size: int,
    edit: SettingsEdit,
) -> ResizeSettings:
    """Согласование с границами по умолчанию (200 %, 20000 px)."""
    return SettingsReconciler().reconcile(current, original, original_byte_size, edit)
