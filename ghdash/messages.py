"""Messages passed between dashboard components, and shared glyphs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ghdash.config import Config

WAITING_ICON = ""
FAILURE_ICON = "󰅙"
SUCCESS_ICON = ""


@dataclass(frozen=True)
class Dimensions:
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class ErrMsg:
    err: BaseException

    def __str__(self) -> str:
        return str(self.err)


@dataclass(frozen=True)
class InitMsg:
    config: Config


@dataclass(frozen=True)
class TaskFinishedMsg:
    task_id: str
    section_id: int = 0
    section_type: str = ""
    err: Optional[BaseException] = None
    msg: Any = None


@dataclass(frozen=True)
class ClearTaskMsg:
    task_id: str