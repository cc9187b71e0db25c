"""Типизированные ошибки конвертации.

Все ошибки наследуются от `ConversionError`, поэтому вызывающему коду
достаточно одного `except ConversionError`, чтобы показать сообщение
и оставить интерфейс в состоянии для повторной попытки.
"""
from __future__ import annotations


class ConversionError(Exception):
    """Общая ошибка преобразования или передачи данных движку."""


class DecodeError(ConversionError):
    """Источник нельзя интерпретировать как растровое изображение."""


class ShapeMismatchError(ConversionError):
    """Длина буфера не равна width * height * 4.

    Attributes:
        expected: Ожидаемая длина, байт.
        actual: Фактическая длина, байт.
    """

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"RGBA size mismatch: got {actual}, expected {expected}")
        self.expected = expected
        self.actual = actual

    def __reduce__(self):
        # pickling across the worker process boundary
        return (type(self), (self.expected, self.actual))


class EngineUnavailableError(ConversionError):
    """Вычислительный движок не запущен, сломан или не знает процедуру."""
