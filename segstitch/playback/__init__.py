from .adapter import PlaybackAdapter, PlaybackSignal
from .controller import PlaybackController
from .scheduler import BoundaryScheduler, SchedulerPhase, ScheduleState
from .simulated import SimulatedPlaybackAdapter
from .timers import AsyncioTimerService, ManualTimerService, TimerService
