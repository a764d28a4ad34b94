"""AutoSaveController — сессия калькулятора НДС.

Владеет сырым текстом полей (сумма, ставка), режимом и отображаемым
результатом. Каждое событие ввода проходит через AutoSaveStateMachine,
эффекты перехода (отмена/запуск таймера, коммит в HistoryStore)
применяются здесь, строго в порядке поступления событий.
"""

import logging
from typing import Callable, Optional

from vatcalc.core.domain.calculation import CalculationMode, CalculationResult
from vatcalc.engine import InvalidArgument, calculate_vat
from vatcalc.engine.validation import is_acceptable_input, parse_calculation_inputs
from vatcalc.history.store import HistoryStore

from .scheduler import Cancellable, Scheduler
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

logger = logging.getLogger(__name__)

ENTER_KEY = "Enter"


class AutoSaveController:
    """Сессия калькулятора с авто-сохранением результатов в историю."""

    def __init__(
        self,
        history: HistoryStore,
        scheduler: Scheduler,
        config: Optional[AutoSaveConfig] = None,
        clock_ms: Optional[Callable[[], int]] = None,
    ):
        """
        Args:
            history: история, куда коммитятся результаты
            scheduler: источник отменяемых отложенных callback'ов (debounce)
            config: конфигурация авто-сохранения
            clock_ms: источник времени расчёта (UTC ms); default — системное время
        """
        self.history = history
        self.config = config or AutoSaveConfig()
        self._scheduler = scheduler
        self._machine = AutoSaveStateMachine(self.config)
        self._clock_ms = clock_ms

        self._state = AutoSaveState()
        self._pending_handle: Optional[Cancellable] = None
        self._pending_handle_id: Optional[int] = None

        self._amount = ""
        self._vat_rate = self.config.default_vat_rate
        self._mode = self.config.default_mode
        self._result: Optional[CalculationResult] = None

    # -------------------------------------------------------------------------
    # Read-only view
    # -------------------------------------------------------------------------

    @property
    def amount(self) -> str:
        return self._amount

    @property
    def vat_rate(self) -> str:
        return self._vat_rate

    @property
    def mode(self) -> CalculationMode:
        return self._mode

    @property
    def result(self) -> Optional[CalculationResult]:
        """Текущий результат для отображения (None — результата нет)."""
        return self._result

    @property
    def state(self) -> AutoSaveState:
        return self._state

    @property
    def phase(self) -> AutoSavePhase:
        return self._state.phase

    # -------------------------------------------------------------------------
    # Input events
    # -------------------------------------------------------------------------

    def set_amount(self, value: str) -> bool:
        """
        Правка поля суммы.

        Очистка непустого поля коммитит последний валидный результат;
        ввод нового значения перезапускает debounce, если из него получается
        результат (например, "." не запускает таймер).

        Returns:
            False если текст отклонён фильтром ввода (состояние не меняется)
        """
        if not is_acceptable_input(value):
            return False

        previous = self._amount
        if previous != "" and value == "":
            self._dispatch(AmountCleared())
            self._amount = value
            self._refresh(reschedule=False)
        elif value != previous:
            self._amount = value
            self._refresh(reschedule=True)
        return True

    def set_vat_rate(self, value: str) -> bool:
        """
        Правка поля ставки. Debounce перезапускается только при непустой
        сумме и реально изменившемся тексте.
        """
        if not is_acceptable_input(value):
            return False

        previous = self._vat_rate
        if value == previous:
            return True

        self._vat_rate = value
        self._refresh(reschedule=self._amount != "")
        return True

    def set_mode(self, mode: CalculationMode | str) -> None:
        """Смена режима; при непустой сумме сначала коммит под старым режимом."""
        new_mode = CalculationMode(mode)
        if new_mode == self._mode:
            return

        if self._amount != "":
            self._dispatch(ModeChanged(new_mode=new_mode))

        self._mode = new_mode
        self._refresh(reschedule=False)

    def blur(self) -> bool:
        """Потеря фокуса полем суммы: немедленный коммит."""
        return self._dispatch(CommitRequested(CommitTrigger.BLUR)).committed

    def key_down(self, key: str) -> bool:
        """Нажатие клавиши в поле суммы; Enter — немедленный коммит.

        Returns:
            True если клавиша обработана
        """
        if key != ENTER_KEY:
            return False
        self._dispatch(CommitRequested(CommitTrigger.ENTER))
        return True

    def save_to_history(self) -> bool:
        """Ручной коммит текущего результата. True если запись добавлена."""
        return self._dispatch(CommitRequested(CommitTrigger.MANUAL)).committed

    def reset(self) -> None:
        """Коммит текущего результата, затем сброс полей к значениям по умолчанию."""
        self._dispatch(ResetRequested())
        self._amount = ""
        self._vat_rate = self.config.default_vat_rate
        self._mode = self.config.default_mode
        self._result = None

    def close(self) -> None:
        """Отмена ожидающего таймера без коммита."""
        self._dispatch(SessionClosed())

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _calculate(self) -> tuple[Optional[CalculationResult], Optional[float]]:
        parsed = parse_calculation_inputs(self._amount, self._vat_rate)
        if parsed is None:
            return None, None

        amount, vat_rate = parsed
        ts_utc_ms = self._clock_ms() if self._clock_ms is not None else None
        try:
            return calculate_vat(amount, vat_rate, self._mode, ts_utc_ms), amount
        except InvalidArgument as e:
            logger.debug("Calculation rejected: %s", e)
            return None, amount

    def _refresh(self, reschedule: bool) -> None:
        """Пересчёт; debounce перезапускается только для валидного результата."""
        result, amount = self._calculate()
        self._result = result
        self._dispatch(
            ResultUpdated(result=result, amount=amount, reschedule=reschedule and result is not None)
        )

    def _on_timer(self, timer_id: int) -> None:
        if timer_id == self._pending_handle_id:
            self._pending_handle = None
            self._pending_handle_id = None
        self._dispatch(TimerFired(timer_id))

    def _dispatch(self, event: AutoSaveEvent) -> AutoSaveTransitionResult:
        transition = self._machine.evaluate_transition(self._state, event)

        if transition.cancel_timer_id is not None and transition.cancel_timer_id == self._pending_handle_id:
            if self._pending_handle is not None:
                self._pending_handle.cancel()
            self._pending_handle = None
            self._pending_handle_id = None

        # Состояние и таймер применяются до записи в историю
        self._state = transition.new_state

        if transition.schedule_timer_id is not None:
            timer_id = transition.schedule_timer_id
            self._pending_handle = self._scheduler.schedule(
                transition.schedule_delay_ms,
                lambda: self._on_timer(timer_id),
            )
            self._pending_handle_id = timer_id

        if transition.commit is not None:
            self.history.append(transition.commit)
            logger.debug(
                "Committed %s result to history (%s)",
                transition.commit.mode.value,
                transition.transition_reason,
            )

        if transition.previous_phase != transition.new_state.phase or transition.committed:
            logger.debug(
                "Auto-save %s → %s: %s (%s)",
                transition.previous_phase.value,
                transition.new_state.phase.value,
                transition.transition_reason,
                transition.details,
            )
        return transition
