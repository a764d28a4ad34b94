"""AutoSave — управление фиксацией результатов расчёта в истории.

- Debounce при наборе, немедленный коммит при blur/Enter/смене режима/reset
- Дедупликация по ContentKey
- Scheduler-абстракция для отменяемого таймера debounce
"""

from .controller import AutoSaveController
from .scheduler import AsyncioScheduler, Cancellable, ManualScheduler, Scheduler
from .state_machine import (
    AmountCleared,
    AutoSaveConfig,
    AutoSaveEvent,
    AutoSavePhase,
    AutoSaveState,
    AutoSaveStateMachine,
    AutoSaveTransitionResult,
    CommitRequested,
    CommitTrigger,
    ModeChanged,
    ResetRequested,
    ResultUpdated,
    SessionClosed,
    TimerFired,
)

__all__ = [
    # Controller
    "AutoSaveController",
    # Scheduler
    "AsyncioScheduler",
    "Cancellable",
    "ManualScheduler",
    "Scheduler",
    # State machine
    "AutoSaveConfig",
    "AutoSavePhase",
    "AutoSaveState",
    "AutoSaveStateMachine",
    "AutoSaveTransitionResult",
    "CommitTrigger",
    # Events
    "AutoSaveEvent",
    "AmountCleared",
    "CommitRequested",
    "ModeChanged",
    "ResetRequested",
    "ResultUpdated",
    "SessionClosed",
    "TimerFired",
]
