"""Иерархия исключений приложения."""
from __future__ import annotations


class ResizerError(Exception):
    """Базовый класс для всех исключений проекта."""

    pass


class ImageLoadError(ResizerError):
    """Файл не найден или не распознан как изображение."""

    pass


class InvalidSettings(ResizerError):
    """Размеры не положительные или не конечные, кодировать нечего."""

    pass


class EncodeError(ResizerError):
    """Не удалось создать поверхность или кодировщик отверг формат."""

    pass


class TargetUnreachable(ResizerError):
    """Поиск качества не уложился в заданный размер файла.

    Движок кодирования это исключение не бросает: результат возвращается
    с фактическим размером. Бросается только из `EncodeResult.raise_for_target()`.
    """

    def __init__(self, target_bytes: int, actual_bytes: int) -> None:
        super().__init__(
            f"Целевой размер {target_bytes} Б недостижим, получено {actual_bytes} Б"
        )
        self.target_bytes = target_bytes
        self.actual_bytes = actual_bytes
