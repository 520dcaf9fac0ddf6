"""
Logging infrastructure for the emuchip8 core.

The core never imports :mod:`logging` directly; the machine reports
through an :class:`ILogger` so that the hot ``step()`` path costs a
single attribute lookup when logging is off.

Levels used by :class:`~emuchip8.core.machine.Chip8`:

* 1 -- fatal runtime errors
* 2 -- program loads, unknown opcodes (when traced)
* 3 -- one line per executed instruction
"""

from abc import ABC, abstractmethod


class ILogger(ABC):
    """Logging interface with level-based filtering."""

    @property
    @abstractmethod
    def level(self) -> int: ...

    @level.setter
    @abstractmethod
    def level(self, value: int): ...

    @abstractmethod
    def log(self, level: int, message: str): ...


class NullLogger(ILogger):
    """No-op logger implementation."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._level = 0
        return cls._instance

    @property
    def level(self) -> int:
        return self._level

    @level.setter
    def level(self, value: int):
        self._level = value

    def log(self, level: int, message: str):
        pass


class ConsoleLogger(ILogger):
    """Logger that prints to the console."""

    def __init__(self, level: int = 0):
        self._level = level

    @property
    def level(self) -> int:
        return self._level

    @level.setter
    def level(self, value: int):
        self._level = value

    def log(self, level: int, message: str):
        if level <= self._level:
            print(f"[CHIP8:{level}] {message}")


class RecordingLogger(ILogger):
    """Logger that keeps ``(level, message)`` pairs in memory.

    Useful for tests and for embedding code that inspects a trace.
    """

    def __init__(self, level: int = 0):
        self._level = level
        self.records: list = []

    @property
    def level(self) -> int:
        return self._level

    @level.setter
    def level(self, value: int):
        self._level = value

    def log(self, level: int, message: str):
        if level <= self._level:
            self.records.append((level, message))

    def messages(self, level: int = None) -> list:
        """Return the recorded messages, optionally only those at *level*."""
        return [m for lvl, m in self.records if level is None or lvl == level]


# Default logger instance
DEFAULT_LOGGER: ILogger = NullLogger()
