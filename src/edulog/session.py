"""Session state machine and controller.

``reduce`` is the pure transition function over ``SessionState``. The
controller owns the one live state value and performs the side effects
around each transition: capture handle, one-second timer, playback file
and the submission worker.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from .errors import (
    CaptureUnavailable,
    EdulogError,
    SubmissionFailed,
    describe_error,
)
from .models import (
    AnalysisPayload,
    AudioBlob,
    Phase,
    ReportModel,
    SessionState,
    SubmissionResult,
)
from .report import build_report
from .scheduler import RepeatingTimer
from .storage import build_recording_basename, discard_playback_file, write_playback_file

logger = logging.getLogger("edulog")

BUSY_PHASES = (Phase.RECORDING, Phase.SUBMITTING)


@dataclass(frozen=True)
class RecordingStarted:
    pass


@dataclass(frozen=True)
class CaptureFailed:
    message: str


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class RecordingStopped:
    playback_path: Optional[str] = None


@dataclass(frozen=True)
class SubmissionRetried:
    pass


@dataclass(frozen=True)
class SubmissionSucceeded:
    report: ReportModel
    generation: int


@dataclass(frozen=True)
class SubmissionRejected:
    message: str
    generation: int
    keep_playback: bool = False


@dataclass(frozen=True)
class ReturnedHome:
    pass


def reduce(state: SessionState, event) -> SessionState:
    if isinstance(event, RecordingStarted):
        if state.phase in BUSY_PHASES:
            return state
        return SessionState(phase=Phase.RECORDING, generation=state.generation + 1)

    if isinstance(event, CaptureFailed):
        if state.phase is Phase.SUBMITTING:
            return state
        return SessionState(
            phase=Phase.IDLE,
            error_message=event.message,
            generation=state.generation,
        )

    if isinstance(event, Tick):
        if state.phase is not Phase.RECORDING:
            return state
        return replace(state, elapsed_seconds=state.elapsed_seconds + 1)

    if isinstance(event, RecordingStopped):
        if state.phase is not Phase.RECORDING:
            return state
        return replace(state, phase=Phase.SUBMITTING, playback_path=event.playback_path)

    if isinstance(event, SubmissionRetried):
        if state.phase is not Phase.IDLE or not state.playback_path:
            return state
        return replace(state, phase=Phase.SUBMITTING, error_message=None)

    if isinstance(event, SubmissionSucceeded):
        if state.phase is not Phase.SUBMITTING or event.generation != state.generation:
            return state
        return replace(
            state, phase=Phase.REPORTING, report=event.report, error_message=None
        )

    if isinstance(event, SubmissionRejected):
        if state.phase is not Phase.SUBMITTING or event.generation != state.generation:
            return state
        return SessionState(
            phase=Phase.IDLE,
            error_message=event.message,
            playback_path=state.playback_path if event.keep_playback else None,
            generation=state.generation,
        )

    if isinstance(event, ReturnedHome):
        if state.phase is Phase.SUBMITTING:
            return state
        return SessionState(generation=state.generation + 1)

    raise TypeError(f"Unknown session event: {event!r}")


def _spawn_thread(target: Callable[[], None]) -> None:
    threading.Thread(target=target, daemon=True).start()


class SessionController:
    def __init__(
        self,
        recorder,
        submit: Callable[[AudioBlob], AnalysisPayload],
        scheduler,
        playback_dir: Optional[str] = None,
        tick_interval_ms: int = 1000,
        keep_audio_on_failure: bool = False,
        spawn: Callable[[Callable[[], None]], None] = _spawn_thread,
    ) -> None:
        self._recorder = recorder
        self._submit = submit
        self._scheduler = scheduler
        self._playback_dir = playback_dir
        self._tick_interval_ms = tick_interval_ms
        self._keep_audio_on_failure = keep_audio_on_failure
        self._spawn = spawn
        self._state = SessionState()
        self._handle = None
        self._timer: Optional[RepeatingTimer] = None
        self._retained_blob: Optional[AudioBlob] = None
        self._listeners: List[Callable[[SessionState], None]] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def can_retry(self) -> bool:
        return (
            self._state.phase is Phase.IDLE
            and self._retained_blob is not None
            and bool(self._state.playback_path)
        )

    def subscribe(self, callback: Callable[[SessionState], None]) -> None:
        self._listeners.append(callback)

    def _dispatch(self, event) -> None:
        previous = self._state
        self._state = reduce(previous, event)
        if self._state is previous:
            return
        if self._state.phase is not previous.phase:
            logger.info("Session %s -> %s", previous.phase.value, self._state.phase.value)
        for callback in list(self._listeners):
            callback(self._state)

    def start(self) -> bool:
        if self._state.phase in BUSY_PHASES:
            logger.warning("Start ignored while %s", self._state.phase.value)
            return False

        discard_playback_file(self._state.playback_path)
        self._retained_blob = None
        try:
            handle = self._recorder.acquire()
            self._recorder.begin(handle)
        except CaptureUnavailable as exc:
            logger.warning("Capture unavailable: %s", exc)
            self._dispatch(CaptureFailed(describe_error(exc)))
            return False

        self._handle = handle
        self._dispatch(RecordingStarted())
        self._timer = RepeatingTimer(self._scheduler, self._tick_interval_ms, self._tick)
        self._timer.start()
        return True

    def _tick(self) -> None:
        self._dispatch(Tick())

    def _release_capture(self) -> Optional[AudioBlob]:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        handle, self._handle = self._handle, None
        return self._recorder.finalize(handle)

    def stop(self) -> bool:
        if self._state.phase is not Phase.RECORDING or self._handle is None:
            logger.debug("Stop ignored while %s", self._state.phase.value)
            return False

        try:
            blob = self._release_capture()
        except Exception as exc:
            logger.exception("Finalizing the recording failed")
            self._dispatch(CaptureFailed(describe_error(CaptureUnavailable(str(exc)))))
            return False
        if blob is None:
            self._dispatch(CaptureFailed(describe_error(CaptureUnavailable("no audio"))))
            return False

        playback_path = None
        if self._playback_dir:
            try:
                playback_path = write_playback_file(
                    self._playback_dir, build_recording_basename(), blob
                )
            except OSError as exc:
                logger.warning("Could not write playback file: %s", exc)

        self._dispatch(RecordingStopped(playback_path))
        self._begin_submission(blob)
        return True

    def retry(self) -> bool:
        if not self.can_retry:
            return False
        blob = self._retained_blob
        self._dispatch(SubmissionRetried())
        self._begin_submission(blob)
        return True

    def go_home(self) -> bool:
        if self._state.phase is Phase.SUBMITTING:
            logger.warning("Go home ignored while a submission is in flight")
            return False
        if self._state.phase is Phase.RECORDING:
            try:
                self._release_capture()
            except Exception:
                logger.exception("Releasing the capture device failed")
        discard_playback_file(self._state.playback_path)
        self._retained_blob = None
        self._dispatch(ReturnedHome())
        return True

    def _run_submission(self, blob: AudioBlob) -> SubmissionResult:
        try:
            return SubmissionResult(payload=self._submit(blob))
        except EdulogError as exc:
            return SubmissionResult(error=exc)
        except Exception as exc:
            logger.exception("Unexpected submission error")
            return SubmissionResult(error=SubmissionFailed(None, str(exc)))

    def _begin_submission(self, blob: AudioBlob) -> None:
        generation = self._state.generation

        def _worker() -> None:
            result = self._run_submission(blob)
            self._scheduler.after(
                0, lambda: self._on_submission_result(generation, blob, result)
            )

        self._spawn(_worker)

    def _on_submission_result(
        self, generation: int, blob: AudioBlob, result: SubmissionResult
    ) -> None:
        if (
            self._state.phase is not Phase.SUBMITTING
            or generation != self._state.generation
        ):
            logger.debug("Dropping stale submission result (generation %d)", generation)
            return
        if result.ok:
            self._retained_blob = None
            self._dispatch(SubmissionSucceeded(build_report(result.payload), generation))
            return

        error = result.error or SubmissionFailed(None, "empty response")
        logger.warning("Submission failed: %s", error)
        keep = self._keep_audio_on_failure and bool(self._state.playback_path)
        if keep:
            self._retained_blob = blob
        else:
            discard_playback_file(self._state.playback_path)
        self._dispatch(SubmissionRejected(describe_error(error), generation, keep))
