"""Настройки приложения из переменных окружения.

LUMA_ENGINE       "inline" | "process" (по умолчанию "process")
LUMA_MIN_BUSY_MS  минимальная длительность индикатора занятости, мс (300)
LUMA_OUTPUT_NAME  имя файла результата ("grayscale.png")
LUMA_LOG_LEVEL    уровень логирования ("INFO")
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from luma_converter.services.engine import ENGINE_KINDS
from luma_converter.services.image_service import DEFAULT_OUTPUT_NAME


@dataclass(frozen=True)
class Settings:
    engine: str = "process"
    min_busy_ms: int = 300
    output_name: str = DEFAULT_OUTPUT_NAME
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Читает настройки; некорректные значения дают `ValueError`."""
        env = os.environ if env is None else env

        engine = env.get("LUMA_ENGINE", cls.engine).strip().lower()
        if engine not in ENGINE_KINDS:
            raise ValueError(f"LUMA_ENGINE must be one of {sorted(ENGINE_KINDS)}, got {engine!r}")

        raw_busy = env.get("LUMA_MIN_BUSY_MS", str(cls.min_busy_ms)).strip()
        try:
            min_busy_ms = int(raw_busy)
        except ValueError:
            raise ValueError(f"LUMA_MIN_BUSY_MS must be an integer, got {raw_busy!r}") from None
        if min_busy_ms < 0:
            raise ValueError(f"LUMA_MIN_BUSY_MS must be >= 0, got {min_busy_ms}")

        output_name = env.get("LUMA_OUTPUT_NAME", cls.output_name).strip() or cls.output_name

        log_level = env.get("LUMA_LOG_LEVEL", cls.log_level).strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"LUMA_LOG_LEVEL is not a logging level: {log_level!r}")

        return cls(engine=engine, min_busy_ms=min_busy_ms, output_name=output_name, log_level=log_level)
