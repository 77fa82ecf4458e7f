"""
Drag interaction adapter.

Turns a horizontal pointer drag on a task bar into a whole-day move. Pointer
motion only updates the session; the move is committed once, on release.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from gantt_engine.config.settings import settings
from gantt_engine.scheduler import GanttScheduler, ScheduleUpdate

logger = logging.getLogger(__name__)


def quantize_day_delta(pixel_delta: float, day_width_px: float) -> int:
    """
    Convert a pixel offset to whole days.

    Halves round toward positive infinity, so -45px at 30px/day is -1 day
    and +45px is +2 days.
    """
    if day_width_px <= 0:
        raise ValueError(f"Day width must be positive, got {day_width_px}")
    return int(math.floor(pixel_delta / day_width_px + 0.5))


class DragState(Enum):
    IDLE = 'idle'
    DRAGGING = 'dragging'
    RELEASED = 'released'
    CANCELLED = 'cancelled'


@dataclass
class DragSession:
    """Pointer state of one drag gesture."""

    task_id: str
    origin_x: float
    day_width_px: float
    current_x: float = 0.0
    state: DragState = DragState.IDLE

    def __post_init__(self):
        self.current_x = self.origin_x
        self.state = DragState.DRAGGING

    @property
    def is_active(self) -> bool:
        return self.state == DragState.DRAGGING

    @property
    def pixel_delta(self) -> float:
        return self.current_x - self.origin_x

    @property
    def day_delta(self) -> int:
        return quantize_day_delta(self.pixel_delta, self.day_width_px)

    def move(self, x: float) -> int:
        """Record pointer motion. Returns the day delta a release here would give."""
        if not self.is_active:
            raise RuntimeError(f"Drag on {self.task_id} is {self.state.value}")
        self.current_x = x
        return self.day_delta

    def release(self, x: Optional[float] = None) -> int:
        """End the gesture and return the final day delta."""
        if not self.is_active:
            raise RuntimeError(f"Drag on {self.task_id} is {self.state.value}")
        if x is not None:
            self.current_x = x
        self.state = DragState.RELEASED
        return self.day_delta

    def cancel(self) -> None:
        if self.is_active:
            self.state = DragState.CANCELLED


class DragAdapter:
    """
    Connects drag gestures to the scheduler.

    One gesture at a time; a new one cannot start while another is active
    or while the scheduler is still committing a previous change.
    """

    def __init__(self, scheduler: GanttScheduler, day_width_px: Optional[float] = None,
                 zoom: Optional[str] = None):
        self.scheduler = scheduler
        self.day_width_px = day_width_px if day_width_px is not None else settings.get_day_width(zoom)
        if self.day_width_px <= 0:
            raise ValueError(f"Day width must be positive, got {self.day_width_px}")
        self.session: Optional[DragSession] = None

    def set_zoom(self, zoom: str) -> None:
        """Switch day width for gestures started after this call."""
        self.day_width_px = settings.get_day_width(zoom)

    def begin(self, task_id: str, x: float) -> Optional[DragSession]:
        """Start dragging a task bar. Returns None if input is currently blocked."""
        if self.session is not None and self.session.is_active:
            logger.debug(f"Drag on {task_id} ignored: {self.session.task_id} still dragging")
            return None
        if self.scheduler.busy:
            logger.debug(f"Drag on {task_id} ignored: schedule change in flight")
            return None
        if task_id not in self.scheduler.network:
            logger.warning(f"Drag ignored: unknown task {task_id}")
            return None
        self.session = DragSession(task_id=task_id, origin_x=x, day_width_px=self.day_width_px)
        return self.session

    def move(self, x: float) -> int:
        """Forward pointer motion; nothing is committed."""
        if self.session is None or not self.session.is_active:
            return 0
        return self.session.move(x)

    def release(self, x: Optional[float] = None) -> Optional[ScheduleUpdate]:
        """
        Finish the gesture and commit the move.

        Returns None when there is no active drag or the drag snapped back
        to the original day.
        """
        if self.session is None or not self.session.is_active:
            return None
        session = self.session
        day_delta = session.release(x)
        self.session = None

        if day_delta == 0:
            return None
        logger.info(f"Drag released on {session.task_id}: {day_delta:+d} day(s)")
        return self.scheduler.shift_task(session.task_id, day_delta)

    def cancel(self) -> None:
        """Abort the gesture (pointer left the canvas, escape, interruption)."""
        if self.session is not None:
            self.session.cancel()
            logger.debug(f"Drag on {self.session.task_id} cancelled")
        self.session = None
