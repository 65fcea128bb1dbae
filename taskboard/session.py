"""
Session refresh scheduler.

Keeps an access token fresh without user action:

    IDLE ──set_session(s)──▶ ARMED ──tick, remaining <= threshold──▶ REFRESH_IN_FLIGHT
      ▲                        ▲                                        │
      └──set_session(None)/stop┴──────────refresh_completed(...)────────┘

A repeating timer drives tick(). The timer is cancelled whenever the session
goes away or the owning context is torn down. The scheduler never retries on
its own beyond the next tick; refresh failures belong to the auth client.

Times come from an injectable clock. The default is time.time (seconds) with
interval and threshold of 5.0; any unit works as long as all three agree.
"""
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 5.0
DEFAULT_REFRESH_THRESHOLD = 5.0
WARNING_WINDOW = 60.0  # seconds left before the status badge turns to a warning


@dataclass(frozen=True)
class Session:
    """What the scheduler needs to know about a session: when its token expires."""
    access_token_expiry: float


class AuthClient(Protocol):
    """The auth collaborator. Only refresh() is used here."""

    def refresh(self) -> Optional[Session]:
        """
        Start a token refresh.

        Return the refreshed Session if it completed synchronously, or None
        if the outcome will be reported later via refresh_completed().
        """
        ...


class SessionState(Enum):
    IDLE = "idle"
    ARMED = "armed"
    REFRESH_IN_FLIGHT = "refresh_in_flight"


# ── Timer ────────────────────────────────────────────────────────────────────


class RepeatingTimer:
    """Calls `callback` every `interval` seconds on a daemon thread until cancelled."""

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "session-refresh"):
        self.interval = interval
        self.callback = callback
        self.name = name
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                logger.error(f"Timer {self.name} callback failed: {e}")

    def cancel(self, timeout: Optional[float] = 1.0) -> None:
        """
        Stop the timer and wait up to `timeout` seconds for its thread to exit.

        Safe to call more than once, and from the callback itself (no join
        then). A timeout of None skips the wait.
        """
        self._stopped.set()
        thread = self._thread
        if timeout is None or thread is None or thread is threading.current_thread():
            return
        thread.join(timeout)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and not self._stopped.is_set()


TimerFactory = Callable[[float, Callable[[], None]], RepeatingTimer]


# ── Scheduler ────────────────────────────────────────────────────────────────


class SessionRefreshScheduler:
    """Watches a session's expiry and triggers auth.refresh() ahead of it."""

    def __init__(
        self,
        auth: AuthClient,
        interval: float = DEFAULT_INTERVAL,
        refresh_threshold: float = DEFAULT_REFRESH_THRESHOLD,
        clock: Callable[[], float] = time.time,
        timer_factory: TimerFactory = RepeatingTimer,
    ):
        self.auth = auth
        self.interval = interval
        self.refresh_threshold = refresh_threshold
        self.clock = clock
        self._timer_factory = timer_factory
        self._timer: Optional[RepeatingTimer] = None
        self._session: Optional[Session] = None
        self._state = SessionState.IDLE
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, auth: AuthClient, cfg) -> "SessionRefreshScheduler":
        """Build a scheduler using the refresh_interval/refresh_threshold of a Config."""
        return cls(auth, interval=cfg.refresh_interval, refresh_threshold=cfg.refresh_threshold)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Optional[Session]:
        return self._session

    def set_session(self, session: Optional[Session]) -> None:
        """
        Track a new session (or its absence).

        None stops the scheduler. A session while idle arms it: the timer
        starts and the expiry is checked immediately. While armed, the new
        expiry simply replaces the old one.
        """
        if session is None:
            self.stop()
            return
        with self._lock:
            self._session = session
            if self._state is not SessionState.IDLE:
                return
            self._state = SessionState.ARMED
            self._timer = self._timer_factory(self.interval, self.tick)
            self._timer.start()
        logger.info(f"Session refresh armed (expiry={session.access_token_expiry})")
        self.tick()

    def tick(self) -> bool:
        """
        One periodic check. Returns True if a refresh was triggered.

        Refresh is triggered when remaining <= threshold and no refresh is
        already in flight.
        """
        with self._lock:
            if self._state is not SessionState.ARMED or self._session is None:
                return False
            remaining = self._session.access_token_expiry - self.clock()
            logger.debug(f"Session tick: {remaining} remaining")
            if remaining > self.refresh_threshold:
                return False
            self._state = SessionState.REFRESH_IN_FLIGHT

        logger.info(f"Refreshing session ({remaining} remaining)")
        try:
            refreshed = self.auth.refresh()
        except Exception as e:
            # Reported by the auth client; the next tick may try again
            logger.error(f"Session refresh raised: {e}")
            self.refresh_completed(None)
            return True
        if refreshed is not None:
            self.refresh_completed(refreshed)
        return True

    def refresh_completed(self, session: Optional[Session] = None) -> None:
        """
        Report the outcome of an outstanding refresh.

        A Session means success (its expiry replaces the old one); None means
        failure (expiry unchanged). Either way the scheduler returns to ARMED,
        unless it was stopped in the meantime.
        """
        with self._lock:
            if self._state is not SessionState.REFRESH_IN_FLIGHT:
                return
            if session is not None:
                self._session = session
            self._state = SessionState.ARMED

    def stop(self) -> None:
        """Cancel the timer and drop the session. Idempotent."""
        with self._lock:
            timer, self._timer = self._timer, None
            was_active = self._state is not SessionState.IDLE
            self._session = None
            self._state = SessionState.IDLE
        if timer is not None:
            timer.cancel()
        if was_active:
            logger.info("Session refresh stopped")

    def __enter__(self) -> "SessionRefreshScheduler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


# ── Status badge ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TokenStatus:
    status: str  # "expired" | "warning" | "valid"
    text: str


def token_status(session: Optional[Session], now: Optional[float] = None) -> Optional[TokenStatus]:
    """Describe how close a session (expiry in seconds) is to expiring."""
    if session is None:
        return None
    if now is None:
        now = time.time()
    remaining = session.access_token_expiry - now
    if remaining <= 0:
        return TokenStatus("expired", "Token expired")
    if remaining < WARNING_WINDOW:
        return TokenStatus("warning", f"Expires in {int(remaining)}s")
    return TokenStatus("valid", "Token valid")
