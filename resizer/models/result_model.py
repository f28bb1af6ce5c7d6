"""Результат кодирования."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from resizer.exceptions import TargetUnreachable


@dataclass(frozen=True)
class EncodeResult:
    """Закодированное изображение. Следующее кодирование заменяет объект целиком.

    Fields:
        data: Байты файла.
        size: Длина `data`, байт.
        quality: Качество, с которым получен `data`.
        format: Формат кодирования.
        dimensions: (ширина, высота) результата.
        target_bytes: Запрошенный бюджет, если шёл подбор качества.
        attempts: Сколько раз вызывался кодировщик.
    """
    data: bytes
    size: int
    quality: float
    format: str
    dimensions: tuple[int, int]
    target_bytes: Optional[int] = None
    attempts: int = 1

    @property
    def target_met(self) -> Optional[bool]:
        """True/False при подборе под размер, None в прямом режиме."""
        if self.target_bytes is None:
            return None
        return self.size <= self.target_bytes

    def raise_for_target(self) -> "EncodeResult":
        if self.target_met is False:
            raise TargetUnreachable(self.target_bytes, self.size)
        return self
