"""Clock port — abstract source of "now".

Core modules never read system time directly; they are handed a clock so
every date computation can run against a fixed reference instant.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class ClockPort(Protocol):
    """Abstract clock used by the service layer."""

    def now(self) -> datetime: ...
