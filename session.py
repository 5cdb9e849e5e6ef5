"""Editing session for one bill: share link, auto-save and upgrade."""
import logging
import threading
from typing import List, Mapping, Optional

from codec import encode_state
from config import SAVE_DEBOUNCE_SECONDS, SETTLEMENT_DEBOUNCE_SECONDS
from scheduling import AutoSaver, SettlementRecalculator
from schemas import AppState, Settlement
from share import build_list_url, build_share_url, exceeds_url_budget, requested_list_id, state_from_query
from state import create_default_state, has_user_data

logger = logging.getLogger(__name__)

URL_MODE = "url"
PERSISTED_MODE = "persisted"


class BillSession:
    def __init__(
        self,
        origin: str,
        path: str = "/",
        client=None,
        state: Optional[AppState] = None,
        settlement_delay: float = SETTLEMENT_DEBOUNCE_SECONDS,
        save_delay: float = SAVE_DEBOUNCE_SECONDS,
        timer_factory=threading.Timer,
    ):
        self.origin = origin
        self.path = path
        self.client = client
        self.state = state or create_default_state()
        self.load_error: Optional[str] = None
        self._save_delay = save_delay
        self._timer_factory = timer_factory
        self.saver: Optional[AutoSaver] = None
        self.recalculator = SettlementRecalculator(
            lambda: self.state.people, settlement_delay, timer_factory=timer_factory
        )
        self.recalculator.notify_change()

    @classmethod
    def from_query(cls, params: Mapping[str, str], origin: str, path: str = "/", client=None, **kwargs):
        """Open the bill a share link points at. A list id beats encoded data."""
        list_id = requested_list_id(params)
        if not list_id:
            return cls(origin, path, client, state=state_from_query(params), **kwargs)

        record = client.get_list(list_id) if client is not None else None
        if record is None:
            session = cls(origin, path, client, **kwargs)
            session.load_error = "List not found" if client is not None else "No server to load the list from"
            return session
        session = cls(origin, path, client, state=record.data, **kwargs)
        session._enter_persisted(record.id, record.version)
        return session

    @property
    def mode(self) -> str:
        return PERSISTED_MODE if self.saver else URL_MODE

    @property
    def list_id(self) -> Optional[str]:
        return self.saver.list_id if self.saver else None

    @property
    def version(self) -> int:
        return self.saver.version if self.saver else 0

    @property
    def settlements(self) -> List[Settlement]:
        return self.recalculator.settlements

    @property
    def save_error(self) -> Optional[str]:
        return self.saver.error if self.saver else None

    def changed(self):
        """Call after every edit to ``state``."""
        self.recalculator.notify_change()
        if self.saver:
            self.saver.notify_change()

    def share_url(self) -> str:
        if self.saver:
            return build_list_url(self.origin, self.path, self.saver.list_id)
        return build_share_url(self.origin, self.path, self.state)

    def needs_upgrade(self) -> bool:
        if self.saver or not has_user_data(self.state):
            return False
        return exceeds_url_budget(self.origin, self.path, encode_state(self.state))

    def upgrade(self) -> str:
        """Store the state server-side and switch to the short list link."""
        if self.client is None:
            raise RuntimeError("upgrade needs an API client")
        if self.saver:
            return self.share_url()
        record = self.client.create_list(self.state)
        self._enter_persisted(record.id, record.version)
        logger.info("Upgraded bill to persisted list %s", record.id)
        return self.share_url()

    def leave_persisted(self):
        if self.saver:
            self.saver.stop()
            self.saver = None

    def reset(self):
        """Start over with a blank bill, detached from any persisted list."""
        self.leave_persisted()
        self.recalculator.cancel()
        self.state = create_default_state()
        self.load_error = None
        self.recalculator.notify_change()

    def close(self):
        self.leave_persisted()
        self.recalculator.stop()

    def _enter_persisted(self, list_id: str, version: int):
        self.saver = AutoSaver(
            self.client,
            list_id,
            version,
            lambda: self.state,
            self._save_delay,
            timer_factory=self._timer_factory,
        )
