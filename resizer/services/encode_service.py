"""Ресайз и кодирование: прямой режим и подбор качества под размер файла.

Принципы:
- Исходные пиксели не меняются: ресэмплинг пишет в новое изображение.
- Один ресэмплинг на вызов; пробы качества перекодируют одну и ту же поверхность.
- Состояния между вызовами нет, сервис можно звать из разных потоков.
"""
from __future__ import annotations

import io
import logging
from typing import Callable, Dict, Iterable, Optional, Tuple, Union

import numpy as np
from PIL import Image

from resizer.config import ResizerConfig
from resizer.exceptions import EncodeError
from resizer.models.result_model import EncodeResult
from resizer.models.settings_model import ResizeSettings

logger = logging.getLogger(__name__)

DecodedImage = Union[Image.Image, np.ndarray]
# (итерация, качество, размер, уложились ли в бюджет)
ProbeCallback = Callable[[int, float, int, bool], None]

_PIL_FORMATS = {"JPEG": "JPEG", "PNG": "PNG", "WebP": "WEBP"}


class EncodeService:
    def __init__(
        self,
        iterations: int = 7,
        fallback_quality: float = 0.1,
        searchable_formats: Iterable[str] = ("JPEG",),
        resample: Image.Resampling = Image.Resampling.LANCZOS,
    ) -> None:
        self.iterations = max(1, int(iterations))
        self.fallback_quality = max(0.0, min(1.0, float(fallback_quality)))
        self.searchable_formats = tuple(searchable_formats)
        self.resample = resample

    @classmethod
    def from_config(cls, config: ResizerConfig) -> "EncodeService":
        return cls(
            iterations=config.search_iterations,
            fallback_quality=config.fallback_quality,
            searchable_formats=config.searchable_formats(),
        )

    def uses_search(self, settings: ResizeSettings) -> bool:
        """Подбор качества идёт только для lossy-форматов с заданной целью."""
        return settings.target_bytes is not None and settings.format in self.searchable_formats

    def encode(
        self,
        pixels: DecodedImage,
        settings: ResizeSettings,
        on_probe: Optional[ProbeCallback] = None,
    ) -> EncodeResult:
        """Масштабирует изображение до `settings.width x settings.height` и кодирует.

        Args:
            pixels: Декодированный исходник: `PIL.Image.Image` или массив
                uint8 формы (H, W), (H, W, 3) или (H, W, 4).
            settings: Согласованные настройки.
            on_probe: Вызывается после каждой пробы в режиме подбора.

        Returns:
            `EncodeResult`; при недостижимой цели результат на резервном
            качестве с фактическим размером и `target_met == False`.

        Raises:
            InvalidSettings: размеры не положительные.
            EncodeError: не удалось создать поверхность или закодировать.
        """
        settings.validate()
        source = self._as_image(pixels)
        surface = self._resample(source, settings.dimensions)
        surface = self._prepare_for_format(surface, settings.format)

        target_bytes = settings.target_bytes
        if target_bytes is not None and settings.format in self.searchable_formats:
            return self._search(surface, settings, target_bytes, on_probe)

        quality = 1.0 if settings.format == "PNG" else settings.quality
        data = self._encode_once(surface, settings.format, quality)
        logger.debug(
            "Прямое кодирование %s %dx%d q=%.2f: %d Б",
            settings.format, settings.width, settings.height, quality, len(data),
        )
        return EncodeResult(
            data=data,
            size=len(data),
            quality=quality,
            format=settings.format,
            dimensions=settings.dimensions,
        )

    # ---- Подбор качества ----
    def _search(
        self,
        surface: Image.Image,
        settings: ResizeSettings,
        target_bytes: int,
        on_probe: Optional[ProbeCallback],
    ) -> EncodeResult:
        """Бинарный поиск по качеству в [0, 1] с фиксированным числом итераций.

        Лучший кандидат: самый большой файл, который ещё укладывается в бюджет.
        """
        min_quality, max_quality = 0.0, 1.0
        best: Optional[Tuple[bytes, float]] = None
        # соседние пробы могут попасть в один и тот же целочисленный уровень кодировщика
        encoded: Dict[int, bytes] = {}

        for iteration in range(self.iterations):
            quality = (min_quality + max_quality) / 2
            level = self._encoder_level(quality)
            if level not in encoded:
                encoded[level] = self._encode_once(surface, settings.format, quality)
            data = encoded[level]
            fits = len(data) <= target_bytes
            logger.debug(
                "Проба %d/%d: q=%.4f -> %d Б (%s)",
                iteration + 1, self.iterations, quality, len(data), "ok" if fits else "много",
            )
            if fits:
                # при равном размере берём более позднюю пробу: её качество выше
                if best is None or len(data) >= len(best[0]):
                    best = (data, quality)
                min_quality = quality
            else:
                max_quality = quality
            if on_probe is not None:
                on_probe(iteration, quality, len(data), fits)

        if best is not None:
            data, quality = best
            return EncodeResult(
                data=data,
                size=len(data),
                quality=quality,
                format=settings.format,
                dimensions=settings.dimensions,
                target_bytes=target_bytes,
                attempts=len(encoded),
            )

        data = self._encode_once(surface, settings.format, self.fallback_quality)
        logger.warning(
            "Цель %d Б недостижима для %dx%d, резервное качество %.2f дало %d Б",
            target_bytes, settings.width, settings.height, self.fallback_quality, len(data),
        )
        return EncodeResult(
            data=data,
            size=len(data),
            quality=self.fallback_quality,
            format=settings.format,
            dimensions=settings.dimensions,
            target_bytes=target_bytes,
            attempts=len(encoded) + 1,
        )

    # ---- Вспомогательные функции ----
    @staticmethod
    def _encoder_level(quality: float) -> int:
        """Качество [0, 1] -> шкала Pillow 1..100."""
        return max(1, min(100, int(round(quality * 100))))

    def _as_image(self, pixels: DecodedImage) -> Image.Image:
        if isinstance(pixels, Image.Image):
            image = pixels
        elif isinstance(pixels, np.ndarray):
            image = self._array_to_image(pixels)
        else:
            raise EncodeError(f"Неподдерживаемый источник пикселей: {type(pixels).__name__}")

        # режимы, которые LANCZOS не ресэмплит или кодировщики не принимают
        if image.mode in ("P", "PA"):
            return image.convert("RGBA")
        if image.mode in ("1", "I", "I;16", "F"):
            return image.convert("L")
        if image.mode not in ("L", "LA", "RGB", "RGBA"):
            return image.convert("RGB")
        return image

    @staticmethod
    def _array_to_image(array: np.ndarray) -> Image.Image:
        if array.ndim == 3 and array.shape[2] == 1:
            array = array[:, :, 0]
        if array.ndim not in (2, 3) or (array.ndim == 3 and array.shape[2] not in (3, 4)):
            raise EncodeError(f"Неподдерживаемая форма массива: {array.shape}")
        if array.dtype != np.uint8:
            array = np.clip(np.rint(array), 0, 255).astype(np.uint8)
        return Image.fromarray(np.ascontiguousarray(array))

    def _resample(self, image: Image.Image, size: Tuple[int, int]) -> Image.Image:
        try:
            return image.resize(size, self.resample)
        except (ValueError, OSError, MemoryError) as exc:
            raise EncodeError(f"Не удалось создать поверхность {size[0]}x{size[1]}: {exc}") from exc

    @staticmethod
    def _prepare_for_format(image: Image.Image, fmt: str) -> Image.Image:
        if fmt == "JPEG" and image.mode in ("RGBA", "LA"):
            # у JPEG нет альфа-канала: кладём на белый фон
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background
        if fmt == "WebP" and image.mode in ("L", "LA"):
            return image.convert("RGBA" if image.mode == "LA" else "RGB")
        return image

    def _encode_once(self, image: Image.Image, fmt: str, quality: float) -> bytes:
        pil_format = _PIL_FORMATS.get(fmt)
        if pil_format is None:
            raise EncodeError(f"Неподдерживаемый формат: {fmt}")

        params: dict = {}
        if fmt in ("JPEG", "WebP"):
            params["quality"] = self._encoder_level(quality)
        if fmt == "JPEG":
            params["optimize"] = True

        buffer = io.BytesIO()
        try:
            image.save(buffer, format=pil_format, **params)
        except (OSError, ValueError, KeyError) as exc:
            raise EncodeError(f"Кодировщик {fmt} не сработал: {exc}") from exc
        data = buffer.getvalue()
        if not data:
            raise EncodeError(f"Кодировщик {fmt} вернул пустой результат")
        return data
