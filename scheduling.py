"""
Debounced background work: settlement recalculation and auto-save.

Each debounced job has a single pending timer. A new trigger cancels and
replaces it, and when the timer fires the job reads the latest state, not
the state from when it was scheduled. Every trigger also bumps a
generation counter so a timer that fires after being cancelled does
nothing.
"""
import logging
import threading
from typing import Callable, List, Optional, Sequence

from config import SAVE_DEBOUNCE_SECONDS, SETTLEMENT_DEBOUNCE_SECONDS
from errors import NotFound, TransportFailure, ValidationFailure, VersionConflict
from schemas import AppState, Person, Settlement
from settlement import calculate_settlements

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "Someone else edited this list. Please refresh."
NOT_FOUND_MESSAGE = "This list no longer exists."


class Debouncer:
    def __init__(self, delay: float, func: Callable[[], None], timer_factory=threading.Timer):
        self.delay = delay
        self._func = func
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def trigger(self):
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
            timer = self._timer_factory(self.delay, self._fire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
        timer.start()

    def cancel(self):
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _fire(self, generation: int):
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
        self._func()


class SettlementRecalculator:
    """Keeps ``settlements`` in sync with the people list, after a quiet period."""

    def __init__(
        self,
        get_people: Callable[[], Sequence[Person]],
        delay: float = SETTLEMENT_DEBOUNCE_SECONDS,
        on_update: Optional[Callable[[List[Settlement]], None]] = None,
        timer_factory=threading.Timer,
    ):
        self._get_people = get_people
        self._on_update = on_update
        self._debouncer = Debouncer(delay, self._recalculate, timer_factory)
        self._stopped = False
        self.settlements: List[Settlement] = []
        self.is_calculating = False

    def notify_change(self):
        if self._stopped:
            return
        self.is_calculating = True
        self._debouncer.trigger()

    def cancel(self):
        self._debouncer.cancel()
        self.is_calculating = False

    def stop(self):
        self._stopped = True
        self.cancel()

    def _recalculate(self):
        if self._stopped:
            return
        self.settlements = calculate_settlements(self._get_people())
        self.is_calculating = False
        if self._on_update:
            self._on_update(self.settlements)


class AutoSaver:
    """
    Saves a persisted list after edits settle down.

    Only one save is in flight at a time; an edit that arrives during a save
    queues exactly one follow-up. A version conflict or a missing list stops
    auto-saving for good, since retrying would overwrite someone else's edit.
    Transport errors are reported and the next edit tries again.
    """

    def __init__(
        self,
        client,
        list_id: str,
        version: int,
        get_state: Callable[[], AppState],
        delay: float = SAVE_DEBOUNCE_SECONDS,
        on_version_update: Optional[Callable[[int], None]] = None,
        timer_factory=threading.Timer,
    ):
        self.client = client
        self.list_id = list_id
        self.version = version
        self._get_state = get_state
        self._on_version_update = on_version_update
        self._debouncer = Debouncer(delay, self._flush, timer_factory)
        self._lock = threading.Lock()
        self._in_flight = False
        self._follow_up = False
        self._stopped = False
        self.conflict: Optional[VersionConflict] = None
        self.error: Optional[str] = None

    @property
    def is_saving(self) -> bool:
        return self._in_flight

    @property
    def active(self) -> bool:
        return not self._stopped and self.conflict is None and self.version > 0

    def notify_change(self):
        if self.active:
            self._debouncer.trigger()

    def cancel(self):
        self._debouncer.cancel()

    def stop(self):
        with self._lock:
            self._stopped = True
            self._follow_up = False
        self._debouncer.cancel()

    def _flush(self):
        with self._lock:
            if not self.active:
                return
            if self._in_flight:
                self._follow_up = True
                return
            self._in_flight = True

        try:
            while True:
                self._save_once()
                with self._lock:
                    if not (self._follow_up and self.active):
                        self._follow_up = False
                        break
                    self._follow_up = False
        finally:
            with self._lock:
                self._in_flight = False

    def _save_once(self):
        self.error = None
        try:
            result = self.client.update_list(self.list_id, self._get_state(), self.version)
        except (TransportFailure, ValidationFailure) as e:
            logger.warning("Auto-save of %s failed: %s", self.list_id, e)
            self.error = str(e)
            return

        if result.kind == VersionConflict.kind:
            self.conflict = result
            self.error = CONFLICT_MESSAGE
        elif result.kind == NotFound.kind:
            self._stopped = True
            self.error = NOT_FOUND_MESSAGE
        else:
            self.version = result.record.version
            if self._on_version_update:
                self._on_version_update(self.version)
