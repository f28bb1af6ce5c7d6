"""Настройки приложения из окружения и файла `resizer.env`.

Префикс переменных: RESIZER_ (например, RESIZER_WEBP_TARGET_SEARCH=true).
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ResizerConfig(BaseSettings):
    """Параметры поиска качества, значения по умолчанию и логирование."""

    # Поиск по качеству: 7 итераций дают шаг ~1/128
    search_iterations: int = Field(default=7, ge=1, le=32)
    fallback_quality: float = Field(default=0.1, ge=0.0, le=1.0)
    webp_target_search: bool = False

    # Настройки, с которыми открывается новое изображение
    default_format: Literal["JPEG", "PNG", "WebP"] = "JPEG"
    default_quality: float = Field(default=0.8, ge=0.0, le=1.0)
    default_locked: bool = True

    # Границы ввода
    min_slider_percentage: int = Field(default=10, ge=1)
    max_percentage: int = Field(default=200, ge=1)
    max_dimension: int = Field(default=20000, ge=1)

    log_file: Path = Path("logs/resizer.log")
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file="resizer.env",
        env_file_encoding="utf-8",
        env_prefix="RESIZER_",
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    def searchable_formats(self) -> tuple[str, ...]:
        """Форматы, для которых работает подбор качества под размер."""
        if self.webp_target_search:
            return ("JPEG", "WebP")
        return ("JPEG",)


@lru_cache()
def get_config() -> ResizerConfig:
    """Однократно загруженная конфигурация (файл `resizer.env` необязателен)."""
    return ResizerConfig()
