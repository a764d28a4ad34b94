"""AutoSave State Machine — когда результат расчёта попадает в историю.

- Debounce при наборе: коммит после паузы debounce_delay_ms
- Немедленный коммит при blur/Enter/смене режима/reset
- Очистка суммы коммитит последний валидный результат
- Дедупликация по ContentKey последнего сохранённого результата

Переходы — чистая функция (state, event) → AutoSaveTransitionResult.
Побочные эффекты (коммит, запуск/отмена таймера) описаны в результате и
выполняются владельцем состояния (AutoSaveController).
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from vatcalc.core.domain.calculation import CalculationMode, CalculationResult, content_key
from vatcalc.core.math.rounding import is_positive


class AutoSavePhase(str, Enum):
    """Фаза сессии ввода.

    - IDLE: нет таймера, нет несохранённого валидного результата
    - DIRTY: есть несохранённый валидный результат, таймер не запущен
    - SCHEDULED: запущен таймер коммита
    """
    IDLE = "IDLE"
    DIRTY = "DIRTY"
    SCHEDULED = "SCHEDULED"


class CommitTrigger(str, Enum):
    """Источник немедленного коммита."""
    BLUR = "BLUR"
    ENTER = "ENTER"
    MANUAL = "MANUAL"


@dataclass(frozen=True)
class AutoSaveConfig:
    """Конфигурация авто-сохранения.

    - debounce_delay_ms: пауза после последней правки до коммита
    - default_vat_rate: текст ставки при старте и после reset (ставка НДС Нигерии)
    - default_mode: режим при старте и после reset
    """
    debounce_delay_ms: float = 1500.0
    default_vat_rate: str = "7.5"
    default_mode: CalculationMode = CalculationMode.ADD


@dataclass(frozen=True)
class AutoSaveState:
    """Состояние сессии ввода. Не персистится."""

    phase: AutoSavePhase = AutoSavePhase.IDLE
    last_saved_key: str = ""

    # Последний результат из непустой суммы > 0 (коммитится при очистке поля)
    last_valid_result: Optional[CalculationResult] = None

    # Текущий результат на экране и его пригодность к коммиту (сумма > 0)
    current_result: Optional[CalculationResult] = None
    current_eligible: bool = False

    pending_timer_id: Optional[int] = None
    timer_seq: int = 0


# =============================================================================
# EVENTS
# =============================================================================


@dataclass(frozen=True)
class ResultUpdated:
    """Пересчёт после правки суммы/ставки/режима.

    reschedule=True — правка суммы или ставки на новое валидное значение
    (перезапуск debounce).
    """
    result: Optional[CalculationResult]
    amount: Optional[float]
    reschedule: bool


@dataclass(frozen=True)
class TimerFired:
    timer_id: int


@dataclass(frozen=True)
class AmountCleared:
    pass


@dataclass(frozen=True)
class CommitRequested:
    trigger: CommitTrigger = CommitTrigger.MANUAL


@dataclass(frozen=True)
class ModeChanged:
    """Смена режима при непустой сумме; коммит под СТАРЫМ режимом."""
    new_mode: CalculationMode


@dataclass(frozen=True)
class ResetRequested:
    pass


@dataclass(frozen=True)
class SessionClosed:
    """Закрытие сессии: отмена таймера без коммита."""
    pass


AutoSaveEvent = Union[
    ResultUpdated,
    TimerFired,
    AmountCleared,
    CommitRequested,
    ModeChanged,
    ResetRequested,
    SessionClosed,
]


@dataclass(frozen=True)
class AutoSaveTransitionResult:
    """Результат перехода AutoSave состояния."""

    new_state: AutoSaveState
    previous_phase: AutoSavePhase

    # Эффекты
    commit: Optional[CalculationResult]
    schedule_timer_id: Optional[int]
    schedule_delay_ms: Optional[float]
    cancel_timer_id: Optional[int]

    # Диагностика
    transition_reason: str
    details: str

    @property
    def committed(self) -> bool:
        return self.commit is not None


class AutoSaveStateMachine:
    """AutoSave State Machine.

    | Событие          | IDLE             | DIRTY    | SCHEDULED                 |
    |------------------|------------------|----------|---------------------------|
    | правка (валидно) | → SCHEDULED      | → SCHED. | отмена + новый таймер     |
    | таймер           | —                | —        | коммит → IDLE             |
    | очистка суммы    | коммит last-valid| то же    | отмена + коммит → IDLE    |
    | blur / Enter     | коммит → IDLE    | то же    | отмена + коммит → IDLE    |
    | смена режима     | коммит (старый)  | то же    | отмена + коммит (старый)  |
    | reset            | коммит, сброс    | то же    | отмена + коммит, сброс    |

    После смены режима результат пересчитывается под новым режимом и
    сессия оказывается в DIRTY (таймер не запускается): этот результат ещё
    не сохранён, его зафиксирует следующий blur/Enter/reset.

    Коммит: ключ кандидата == last_saved_key → пропуск, иначе append в
    историю и last_saved_key = ключ. Кандидат допустим только если сумма > 0.
    """

    def __init__(self, config: Optional[AutoSaveConfig] = None):
        self.config = config or AutoSaveConfig()

    def evaluate_transition(
        self,
        state: AutoSaveState,
        event: AutoSaveEvent,
    ) -> AutoSaveTransitionResult:
        """Оценка перехода для события.

        Args:
            state: текущее состояние сессии
            event: входное событие

        Returns:
            AutoSaveTransitionResult с новым состоянием и эффектами
        """
        if isinstance(event, ResultUpdated):
            return self._on_result_updated(state, event)

        if isinstance(event, TimerFired):
            return self._on_timer_fired(state, event)

        if isinstance(event, AmountCleared):
            cleared = replace(
                state,
                last_valid_result=None,
                current_result=None,
                current_eligible=False,
            )
            return self._commit_now(
                state,
                base_state=cleared,
                candidate=state.last_valid_result,
                reason="amount_cleared",
            )

        if isinstance(event, CommitRequested):
            return self._commit_now(
                state,
                base_state=state,
                candidate=self._current_candidate(state),
                reason=f"commit_{event.trigger.value.lower()}",
            )

        if isinstance(event, ModeChanged):
            return self._commit_now(
                state,
                base_state=state,
                candidate=self._current_candidate(state),
                reason=f"mode_changed_to_{event.new_mode.value}",
            )

        if isinstance(event, ResetRequested):
            return self._on_reset(state)

        if isinstance(event, SessionClosed):
            new_state = replace(state, pending_timer_id=None)
            new_state = replace(new_state, phase=self._settled_phase(new_state))
            return self._create_result(
                new_state=new_state,
                previous_phase=state.phase,
                cancel_timer_id=state.pending_timer_id,
                transition_reason="session_closed",
                details="Pending timer cancelled without commit",
            )

        raise TypeError(f"Unknown auto-save event: {event!r}")

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _on_result_updated(
        self,
        state: AutoSaveState,
        event: ResultUpdated,
    ) -> AutoSaveTransitionResult:
        eligible = self._is_eligible(event.result, event.amount)
        updated = replace(
            state,
            current_result=event.result,
            current_eligible=eligible,
            last_valid_result=event.result if eligible else state.last_valid_result,
        )

        if not event.reschedule:
            updated = replace(updated, phase=self._settled_phase(updated))
            return self._create_result(
                new_state=updated,
                previous_phase=state.phase,
                transition_reason="result_updated",
                details=f"eligible={eligible}, phase={updated.phase.value}",
            )

        timer_id = state.timer_seq + 1
        new_state = replace(
            updated,
            phase=AutoSavePhase.SCHEDULED,
            pending_timer_id=timer_id,
            timer_seq=timer_id,
        )
        restarted = state.pending_timer_id is not None
        return self._create_result(
            new_state=new_state,
            previous_phase=state.phase,
            schedule_timer_id=timer_id,
            schedule_delay_ms=self.config.debounce_delay_ms,
            cancel_timer_id=state.pending_timer_id,
            transition_reason="debounce_restarted" if restarted else "debounce_scheduled",
            details=f"timer_id={timer_id}, delay_ms={self.config.debounce_delay_ms}",
        )

    def _on_timer_fired(
        self,
        state: AutoSaveState,
        event: TimerFired,
    ) -> AutoSaveTransitionResult:
        if state.pending_timer_id is None or event.timer_id != state.pending_timer_id:
            # Таймер уже отменён или заменён новым
            return self._create_result(
                new_state=state,
                previous_phase=state.phase,
                transition_reason="stale_timer_ignored",
                details=f"timer_id={event.timer_id}, pending={state.pending_timer_id}",
            )

        return self._commit_now(
            state,
            base_state=state,
            candidate=self._current_candidate(state),
            reason="debounce_elapsed",
            cancel_pending=False,
        )

    def _on_reset(self, state: AutoSaveState) -> AutoSaveTransitionResult:
        commit, saved_key, outcome = self._evaluate_commit(state, self._current_candidate(state))
        # last_saved_key переживает reset: два одинаковых коммита подряд недопустимы
        new_state = AutoSaveState(last_saved_key=saved_key, timer_seq=state.timer_seq)
        return self._create_result(
            new_state=new_state,
            previous_phase=state.phase,
            commit=commit,
            cancel_timer_id=state.pending_timer_id,
            transition_reason="reset",
            details=f"commit={outcome}",
        )

    # -------------------------------------------------------------------------
    # Commit policy
    # -------------------------------------------------------------------------

    def _commit_now(
        self,
        state: AutoSaveState,
        base_state: AutoSaveState,
        candidate: Optional[CalculationResult],
        reason: str,
        cancel_pending: bool = True,
    ) -> AutoSaveTransitionResult:
        """Немедленный коммит кандидата с отменой ожидающего таймера."""
        commit, saved_key, outcome = self._evaluate_commit(state, candidate)
        new_state = replace(base_state, last_saved_key=saved_key, pending_timer_id=None)
        new_state = replace(new_state, phase=self._settled_phase(new_state))
        return self._create_result(
            new_state=new_state,
            previous_phase=state.phase,
            commit=commit,
            cancel_timer_id=state.pending_timer_id if cancel_pending else None,
            transition_reason=reason,
            details=f"commit={outcome}",
        )

    def _evaluate_commit(
        self,
        state: AutoSaveState,
        candidate: Optional[CalculationResult],
    ) -> tuple[Optional[CalculationResult], str, str]:
        """Политика коммита: (коммит или None, новый last_saved_key, исход)."""
        if candidate is None:
            return None, state.last_saved_key, "no_candidate"

        key = content_key(candidate)
        if key == state.last_saved_key:
            return None, state.last_saved_key, "duplicate_suppressed"

        return candidate, key, "committed"

    @staticmethod
    def _is_eligible(result: Optional[CalculationResult], amount: Optional[float]) -> bool:
        return result is not None and amount is not None and is_positive(amount)

    @staticmethod
    def _current_candidate(state: AutoSaveState) -> Optional[CalculationResult]:
        return state.current_result if state.current_eligible else None

    @staticmethod
    def _settled_phase(state: AutoSaveState) -> AutoSavePhase:
        """Фаза по содержимому состояния (без смены таймера)."""
        if state.pending_timer_id is not None:
            return AutoSavePhase.SCHEDULED
        if (
            state.current_eligible
            and state.current_result is not None
            and content_key(state.current_result) != state.last_saved_key
        ):
            return AutoSavePhase.DIRTY
        return AutoSavePhase.IDLE

    def _create_result(
        self,
        new_state: AutoSaveState,
        previous_phase: AutoSavePhase,
        transition_reason: str,
        details: str,
        commit: Optional[CalculationResult] = None,
        schedule_timer_id: Optional[int] = None,
        schedule_delay_ms: Optional[float] = None,
        cancel_timer_id: Optional[int] = None,
    ) -> AutoSaveTransitionResult:
        """Создание результата перехода."""
        return AutoSaveTransitionResult(
            new_state=new_state,
            previous_phase=previous_phase,
            commit=commit,
            schedule_timer_id=schedule_timer_id,
            schedule_delay_ms=schedule_delay_ms,
            cancel_timer_id=cancel_timer_id,
            transition_reason=transition_reason,
            details=details,
        )
