"""
Pomodoro Logic - Cykl życia sesji Pomodoro
==========================================
Zarządza stanem odliczania (TimerState), przejściami sesji
(start / pause / resume / complete / cancel / reset), zegarem
i synchronizacją z magazynem sesji.

Główne zasady:
- Efekt lokalny zawsze natychmiast; backend jest aktualizowany w tle
- Błąd backendu nigdy nie blokuje lokalnego przejścia
- Offline: sesja działa jako lokalna (id == 0)
- Wywołania do backendu idą przez kolejkę FIFO, jedno naraz
- Auto-chain (przerwa po pracy / praca po przerwie) tylko po naturalnym zakończeniu
"""

from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Callable, Deque
from loguru import logger
from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .pomodoro_models import (
    Session,
    SessionType,
    SessionStatus,
    SessionAction,
    PomodoroSettings,
    TimerState,
    utc_now,
)
from .pomodoro_errors import BackendUnreachableError, is_user_facing
from .pomodoro_utils import minutes_to_seconds
from .pomodoro_clock import TimerClock
from .call_dispatcher import APIResponse
from .session_reconciliation import recover_timer_state, should_restart_clock


AUTO_CHAIN_DELAY_MS = 1000

Scheduler = Callable[[int, Callable[[], None]], None]


def next_auto_session(just_completed: SessionType, settings: PomodoroSettings) -> Optional[SessionType]:
    """
    Zwraca typ sesji do automatycznego uruchomienia po zakończeniu sesji.

    Returns:
        SessionType.BREAK / SessionType.WORK lub None (brak auto-startu)
    """
    if just_completed == SessionType.WORK and settings.auto_start_breaks:
        return SessionType.BREAK
    if just_completed == SessionType.BREAK and settings.auto_start_pomodoros:
        return SessionType.WORK
    return None


def _qt_single_shot(delay_ms: int, fn: Callable[[], None]):
    QTimer.singleShot(delay_ms, fn)


@dataclass
class _SessionTicket:
    """Powiązanie podpiętej lokalnie sesji z jej rekordem w backendzie"""
    generation: int
    remote_id: int = 0
    create_pending: bool = False

    @property
    def is_remote_bound(self) -> bool:
        return self.remote_id > 0 or self.create_pending


@dataclass
class _OutboundCall:
    ticket: _SessionTicket
    action: Optional[SessionAction]  # None = create
    session_type: SessionType
    duration_minutes: int = 0


class PomodoroTimerService(QObject):
    """
    Maszyna stanów sesji Pomodoro.

    Stany: idle, running(session), paused(session).
    Completed / cancelled wracają do idle z odpiętą sesją.
    """

    # Sygnały
    state_changed = pyqtSignal(object)      # TimerState (kopia)
    session_started = pyqtSignal(object)    # Session
    session_finished = pyqtSignal(object)   # Session (completed / cancelled)
    session_changed = pyqtSignal()          # udany zapis w backendzie
    error_occurred = pyqtSignal(str)        # NotFound / Conflict
    sound_requested = pyqtSignal(str)       # typ zakończonej sesji

    def __init__(
        self,
        store,
        dispatcher,
        settings_provider,
        connectivity=None,
        clock: Optional[TimerClock] = None,
        scheduler: Optional[Scheduler] = None,
        now_fn: Callable[[], datetime] = utc_now,
        auto_chain_delay_ms: int = AUTO_CHAIN_DELAY_MS,
        parent: Optional[QObject] = None,
    ):
        """
        Args:
            store: Magazyn sesji (PomodoroAPIClient lub InMemorySessionStore)
            dispatcher: ThreadedDispatcher / InlineDispatcher
            settings_provider: Źródło bieżących ustawień (atrybut .current)
            connectivity: ConnectivityMonitor (None = zawsze online)
            clock: Zegar odliczania (domyślnie TimerClock 1 s)
            scheduler: Funkcja (delay_ms, callback) do opóźnionych akcji
            now_fn: Źródło bieżącego czasu UTC
        """
        super().__init__(parent)
        self.store = store
        self.dispatcher = dispatcher
        self.settings_provider = settings_provider
        self.connectivity = connectivity
        self.clock = clock or TimerClock(parent=self)
        self.scheduler = scheduler or _qt_single_shot
        self.now_fn = now_fn
        self.auto_chain_delay_ms = auto_chain_delay_ms

        self._state = TimerState()
        self._work_session_count = 0
        self._generation = 0
        self._ticket: Optional[_SessionTicket] = None
        self._outbound: Deque[_OutboundCall] = deque()
        self._in_flight: Optional[_OutboundCall] = None

        self.clock.tick.connect(self._on_tick)

        logger.info("[POMODORO] PomodoroTimerService initialized")

    # =========================================================================
    # WŁAŚCIWOŚCI
    # =========================================================================

    @property
    def state(self) -> TimerState:
        return self._state.copy()

    @property
    def current_session(self) -> Optional[Session]:
        return self._state.current_session

    @property
    def settings(self) -> PomodoroSettings:
        return self.settings_provider.current

    @property
    def work_session_count(self) -> int:
        return self._work_session_count

    @property
    def needs_reset_confirmation(self) -> bool:
        """Reset aktywnej sesji wymaga potwierdzenia (UI powinien wywołać cancel())"""
        return self._state.current_session is not None and not self._state.is_idle

    @property
    def pending_calls(self) -> int:
        return len(self._outbound) + (1 if self._in_flight else 0)

    def is_offline(self) -> bool:
        if self.settings.offline_mode:
            return True
        return bool(self.connectivity and self.connectivity.is_offline)

    # =========================================================================
    # START
    # =========================================================================

    def start_work(self, duration_minutes: Optional[int] = None):
        """Rozpocznij sesję pracy (domyślny czas z ustawień)"""
        minutes = self.settings.work_duration if duration_minutes is None else duration_minutes
        self._work_session_count += 1
        self._start_session(SessionType.WORK, minutes)

    def start_break(self):
        """Rozpocznij przerwę - długą co sessions_until_long_break sesji pracy"""
        settings = self.settings
        if self._work_session_count >= settings.sessions_until_long_break:
            minutes = settings.long_break_duration
            self._work_session_count = 0
            logger.info("[POMODORO] Long break")
        else:
            minutes = settings.break_duration
        self._start_session(SessionType.BREAK, minutes)

    def _start_session(self, session_type: SessionType, minutes: int):
        if not self._state.is_idle:
            logger.warning("[POMODORO] Starting a new session while another one is active")

        candidate = Session(
            type=session_type,
            status=SessionStatus.RUNNING,
            start_time=self.now_fn(),
            duration_minutes=minutes,
        )
        total = minutes_to_seconds(minutes)
        self._state = TimerState(
            current_session=candidate,
            remaining_time=total,
            is_running=True,
            is_paused=False,
            session_type=session_type,
            total_duration=total,
        )
        ticket = self._attach_new_ticket()
        self.clock.start()

        if self.is_offline():
            logger.info(f"[POMODORO] Offline - {session_type.value} session kept local")
        else:
            ticket.create_pending = True
            self._enqueue(_OutboundCall(ticket, None, session_type, minutes))

        logger.info(f"[POMODORO] Started {session_type.value} session ({minutes} min)")
        self._emit_state()
        self.session_started.emit(replace(self._state.current_session))

    # =========================================================================
    # PRZEJŚCIA
    # =========================================================================

    def pause(self, session_id: Optional[int] = None):
        if not self._state.is_running:
            logger.debug("[POMODORO] pause ignored - timer not running")
            return
        if not self._matches_current(session_id):
            return

        self.clock.stop()
        self._state.is_running = False
        self._state.is_paused = True
        self._set_local_status(SessionStatus.PAUSED)
        self._send_transition(SessionAction.PAUSE)
        self._emit_state()

    def resume(self, session_id: Optional[int] = None):
        if not self._state.is_paused:
            logger.debug("[POMODORO] resume ignored - timer not paused")
            return
        if not self._matches_current(session_id):
            return

        self._state.is_paused = False
        self._state.is_running = True
        self._set_local_status(SessionStatus.RUNNING)
        self.clock.start()
        self._send_transition(SessionAction.RESUME)
        self._emit_state()

    def complete(self, session_id: Optional[int] = None):
        """Zakończ sesję (tick do zera lub akcja użytkownika)"""
        if self._state.is_idle:
            logger.debug("[POMODORO] complete ignored - no active session")
            return
        if not self._matches_current(session_id):
            return

        finished_type = self._state.session_type
        self._finish(SessionStatus.COMPLETED, SessionAction.COMPLETE)

        settings = self.settings
        if settings.sound_enabled:
            self.sound_requested.emit(finished_type.value)

        next_type = next_auto_session(finished_type, settings)
        if next_type is not None:
            logger.info(f"[POMODORO] Auto-start {next_type.value} in {self.auto_chain_delay_ms} ms")
            self.scheduler(self.auto_chain_delay_ms, lambda: self._run_auto_chain(next_type))

    def cancel(self, session_id: Optional[int] = None):
        if self._state.is_idle:
            logger.debug("[POMODORO] cancel ignored - no active session")
            return
        if not self._matches_current(session_id):
            return

        self._finish(SessionStatus.CANCELLED, SessionAction.CANCEL)

    def reset(self):
        """Wróć do idle bez wywołania backendu"""
        self.clock.stop()
        self._state.remaining_time = self._state.total_duration
        self._state.is_running = False
        self._state.is_paused = False
        self._state.current_session = None
        self._ticket = None
        self._emit_state()

    def _finish(self, status: SessionStatus, action: SessionAction):
        self.clock.stop()

        session = self._state.current_session
        ticket = self._ticket
        self._state.current_session = None
        self._state.remaining_time = 0
        self._state.is_running = False
        self._state.is_paused = False
        self._ticket = None

        logger.info(f"[POMODORO] Session {status.value}")
        self._emit_state()
        self._send_transition(action, ticket)

        if session is not None:
            self.session_finished.emit(replace(session, status=status, end_time=self.now_fn()))

    def _run_auto_chain(self, session_type: SessionType):
        if not self._state.is_idle or self._state.current_session is not None:
            logger.debug("[POMODORO] Auto-start skipped - session already attached")
            return
        if session_type == SessionType.WORK:
            self.start_work()
        else:
            self.start_break()

    # =========================================================================
    # ZEGAR
    # =========================================================================

    def _on_tick(self):
        if not self._state.is_running:
            self.clock.stop()
            return

        self._state.remaining_time = max(0, self._state.remaining_time - 1)
        self._emit_state()

        if self._state.remaining_time == 0:
            self.complete()

    # =========================================================================
    # REKONSYLIACJA
    # =========================================================================

    def schedule_restore(self, delay_ms: int = 100):
        """Odłożone odtworzenie aktywnej sesji (po zakończeniu inicjalizacji)"""
        self.scheduler(delay_ms, self.restore_active_session)

    def restore_active_session(self):
        """Pobierz aktywną sesję z backendu i odtwórz stan odliczania"""
        if self.is_offline():
            logger.info("[POMODORO] Offline - skipping active session restore")
            return
        self.dispatcher.submit(self.store.get_active_session, self._on_active_session)

    def _on_active_session(self, response: APIResponse):
        if not response.success:
            logger.warning(f"[POMODORO] Failed to restore active session: {response.error}")
            self._flag_unreachable(response)
            return

        session: Optional[Session] = response.data
        if session is None:
            logger.info("[POMODORO] No active session to restore")
            return

        current = self._state.current_session
        same_session = current is not None and current.id == session.id
        if not self._state.is_idle and not same_session:
            logger.info(f"[POMODORO] Discarding restored session {session.id} - local session already active")
            return

        self._state = recover_timer_state(session, self.now_fn())
        if not same_session or self._ticket is None:
            self._ticket = _SessionTicket(generation=self._next_generation(), remote_id=session.id)

        if should_restart_clock(self._state):
            self.clock.start()
        else:
            self.clock.stop()

        logger.info(
            f"[POMODORO] Restored session {session.id}: "
            f"{self._state.remaining_time}s left, status={session.status.value}"
        )
        self._emit_state()

    # =========================================================================
    # KOLEJKA WYWOŁAŃ
    # =========================================================================

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _attach_new_ticket(self) -> _SessionTicket:
        self._ticket = _SessionTicket(generation=self._next_generation())
        return self._ticket

    def _send_transition(self, action: SessionAction, ticket: Optional[_SessionTicket] = None):
        ticket = ticket or self._ticket
        if ticket is None or not ticket.is_remote_bound:
            return
        if self.is_offline():
            logger.debug(f"[POMODORO] Offline - {action.value} kept local")
            return
        self._enqueue(_OutboundCall(ticket, action, self._state.session_type))

    def _enqueue(self, call: _OutboundCall):
        self._outbound.append(call)
        self._pump()

    def _pump(self):
        while self._in_flight is None and self._outbound:
            call = self._outbound.popleft()

            if call.action is None:
                session_type, minutes = call.session_type, call.duration_minutes
                fn = lambda: self.store.create_session(session_type, minutes)
            else:
                session_id, action = call.ticket.remote_id, call.action
                if session_id <= 0:
                    logger.debug(f"[POMODORO] Dropping {action.value} - session has no remote id")
                    continue
                fn = lambda: self.store.transition_session(session_id, action)

            self._in_flight = call
            self.dispatcher.submit(fn, lambda response, c=call: self._on_call_finished(c, response))

    def _on_call_finished(self, call: _OutboundCall, response: APIResponse):
        self._in_flight = None
        name = call.action.value if call.action else "create"

        if response.success:
            session: Session = response.data
            if call.action is None:
                call.ticket.remote_id = session.id
                call.ticket.create_pending = False
            self.session_changed.emit()
            self._adopt(call, session)
        else:
            if call.action is None:
                call.ticket.create_pending = False
            logger.warning(f"[POMODORO] Remote {name} failed: {response.error}")
            if is_user_facing(response.exception):
                self.error_occurred.emit(response.error or f"{name} failed")
            self._flag_unreachable(response)

        self._pump()

    def _adopt(self, call: _OutboundCall, session: Session):
        """Przyjmij sesję z backendu tylko jeśli wynik nie jest przestarzały"""
        if self._ticket is not call.ticket:
            logger.debug(f"[POMODORO] Stale result for session {session.id} ignored")
            return
        if any(queued.ticket is call.ticket for queued in self._outbound):
            return

        self._state.current_session = session
        self._emit_state()

    def _flag_unreachable(self, response: APIResponse):
        if not isinstance(response.exception, BackendUnreachableError):
            return
        if self._outbound:
            logger.warning(f"[POMODORO] Backend unreachable - dropping {len(self._outbound)} queued calls")
            for dropped in self._outbound:
                if dropped.action is None:
                    dropped.ticket.create_pending = False
            self._outbound.clear()
        if self.connectivity:
            self.connectivity.set_offline_mode(True)

    # =========================================================================
    # POMOCNICZE
    # =========================================================================

    def _matches_current(self, session_id: Optional[int]) -> bool:
        if session_id is None:
            return True
        current = self._state.current_session
        if current is None or current.id != session_id:
            logger.debug(f"[POMODORO] Ignoring action for session {session_id} - not current")
            return False
        return True

    def _set_local_status(self, status: SessionStatus):
        session = self._state.current_session
        if session is not None:
            self._state.current_session = replace(session, status=status)

    def _emit_state(self):
        self.state_changed.emit(self._state.copy())
