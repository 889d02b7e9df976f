"""State shared by every component of the running dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import IntEnum
from typing import Any, Callable, Optional

from ghdash.config import Config, SectionConfig, ViewType


class TaskState(IntEnum):
    START = 0
    FINISHED = 1
    ERROR = 2


@dataclass
class Task:
    id: str
    start_text: str = ""
    finished_text: str = ""
    state: TaskState = TaskState.START
    error: Optional[BaseException] = None
    start_time: Optional[datetime] = None
    finished_time: Optional[datetime] = None


@dataclass
class ProgramContext:
    user: str = ""
    screen_height: int = 0
    screen_width: int = 0
    main_content_width: int = 0
    main_content_height: int = 0
    config: Optional[Config] = None
    config_path: str = ""
    view: ViewType = ViewType.PRS
    error: Optional[BaseException] = None
    theme: Any = None
    styles: Any = None
    on_task_started: Optional[Callable[[Task], Any]] = None
    tasks: dict[str, Task] = field(default_factory=dict)

    def view_sections_config(self) -> list[SectionConfig]:
        """Section configs of the current view, led by the empty search section."""
        if self.config is None:
            raise RuntimeError("configuration has not been loaded")
        if self.view == ViewType.PRS:
            configs = [cfg.to_section_config() for cfg in self.config.pr_sections]
        else:
            configs = [cfg.to_section_config() for cfg in self.config.issues_sections]
        return [SectionConfig(title=""), *configs]

    def start_task(self, task: Task) -> Any:
        """Record ``task`` as started now and notify the listener, if any."""
        started = replace(task, start_time=datetime.now())
        self.tasks[started.id] = started
        if self.on_task_started is None:
            return None
        return self.on_task_started(started)