"""
HistoryStore — ограниченная история расчётов (audit trail)

Упорядоченная коллекция записей, новые первыми, ёмкость фиксируется при
создании (default 10). Вставка в начало вытесняет самую старую запись
(FIFO по возрасту вставки, не LRU).

Мутации (append/clear) выполняются только из одного потока событий
калькулятора; после каждой мутации полный снапшот передаётся
persistence-коллаборатору.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from vatcalc.core.domain.calculation import CalculationResult

from .persistence import DEFAULT_MAX_HISTORY_SIZE, HistoryPersistence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryConfig:
    """
    Конфигурация истории.

    - max_history_size: ёмкость истории, записывается в снапшот вместе с записями
    """
    max_history_size: int = DEFAULT_MAX_HISTORY_SIZE


class HistoryStore:
    """История расчётов с вытеснением самых старых записей.

    Дедупликация — ответственность AutoSaveController, store принимает
    любые CalculationResult, включая повторы.
    """

    def __init__(
        self,
        config: Optional[HistoryConfig] = None,
        persistence: Optional[HistoryPersistence] = None,
    ):
        """
        Args:
            config: конфигурация истории (ёмкость неизменяема после создания)
            persistence: коллаборатор хранения; при наличии снапшот
                восстанавливается сразу при создании
        """
        self.config = config or HistoryConfig()
        if self.config.max_history_size <= 0:
            raise ValueError(
                f"max_history_size must be positive, got {self.config.max_history_size}"
            )

        self._persistence = persistence
        self._entries: List[CalculationResult] = []

        if persistence is not None:
            restored = persistence.load()
            self._entries = list(restored[: self.config.max_history_size])
            if len(restored) > self.config.max_history_size:
                logger.debug(
                    "Restored history truncated from %d to %d entries",
                    len(restored),
                    self.config.max_history_size,
                )

    @property
    def capacity(self) -> int:
        return self.config.max_history_size

    def append(self, entry: CalculationResult) -> None:
        """Вставка записи в начало; при переполнении вытесняется хвост."""
        if not isinstance(entry, CalculationResult):
            raise TypeError(f"entry must be CalculationResult, got {type(entry).__name__}")

        self._entries.insert(0, entry)
        if len(self._entries) > self.capacity:
            evicted = self._entries.pop()
            logger.debug("History full, evicted entry ts=%d", evicted.ts_utc_ms)

        self._persist()

    def clear(self) -> None:
        """Безусловная очистка истории."""
        self._entries = []
        self._persist()

    def list(self) -> Tuple[CalculationResult, ...]:
        """Снапшот истории (новые первыми), только для чтения."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def _persist(self) -> None:
        if self._persistence is not None:
            self._persistence.save(tuple(self._entries), self.capacity)
