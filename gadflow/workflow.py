"""Text-processing steps that communicate through a shared dictionary."""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional

from gadflow.orchestrator import Step

SharedData = Dict[str, Any]

INPUT_KEY = "inputs"
TRIMMED_RESULT_KEY = "trimed"
UPPERCASE_KEY = "uppercase"
LOWERCASE_RESULT_KEY = "lowercase"
REVERSE_RESULT_KEY = "reversed"


class InvalidInputError(ValueError):
    """Raised when a step cannot find the text it works on."""

    def __init__(self, message: str = "invalid input") -> None:
        super().__init__(message)


class _SharedDataStep(Step):
    def __init__(self, shared_data: Optional[SharedData]) -> None:
        self.shared_data = shared_data

    def _text(self, key: str) -> str:
        if self.shared_data is None:
            raise InvalidInputError()
        value = self.shared_data.get(key)
        if not isinstance(value, str):
            raise InvalidInputError()
        return value

    def _store(self, key: str, value: str) -> None:
        assert self.shared_data is not None
        self.shared_data[key] = value


class Trim(_SharedDataStep):
    """Strip surrounding whitespace from the input text."""

    name = "trim"

    def do(self) -> None:
        self._store(TRIMMED_RESULT_KEY, self._text(INPUT_KEY).strip())


class Uppercase(_SharedDataStep):
    """Upper-case the trimmed text."""

    name = "uppercase"

    def do(self) -> None:
        self._store(UPPERCASE_KEY, self._text(TRIMMED_RESULT_KEY).upper())


class Lowercase(_SharedDataStep):
    """Lower-case the trimmed text."""

    name = "lowercase"

    def do(self) -> None:
        self._store(LOWERCASE_RESULT_KEY, self._text(TRIMMED_RESULT_KEY).lower())


class Reverse(_SharedDataStep):
    """Reverse the input text by code point."""

    name = "reverse"

    def do(self) -> None:
        self._store(REVERSE_RESULT_KEY, self._text(INPUT_KEY)[::-1])


_counter_lock = threading.Lock()


class Increase(Step):
    """Increment a process-wide run counter."""

    name = "increase"
    count = 0

    def do(self) -> None:
        with _counter_lock:
            Increase.count += 1