from __future__ import annotations

import logging
from typing import Callable, Optional

from meratranslate.app.notifier import Notice, NoticeCategory, NoticeLevel, Notifier
from meratranslate.contracts import PermissionState, RecognitionResultEvent, TranscriptEvent
from meratranslate.speech.platform import (
    PlatformCapabilities,
    RecognitionSession,
    RecognitionSettings,
)
from meratranslate.speech.state import CaptureState, CaptureStateTracker, RecognitionErrorKind

UNSUPPORTED_MESSAGE = "Speech recognition is not supported on this system"
DENIED_MESSAGE = "Microphone access denied. Please enable microphone permissions and try again."

_ERROR_NOTICES: dict[RecognitionErrorKind, tuple[NoticeCategory, NoticeLevel, str]] = {
    RecognitionErrorKind.PERMISSION_DENIED: (
        NoticeCategory.PERMISSION_DENIED,
        NoticeLevel.ERROR,
        DENIED_MESSAGE,
    ),
    RecognitionErrorKind.NO_SPEECH: (
        NoticeCategory.NO_SPEECH,
        NoticeLevel.WARNING,
        "No speech detected. Please try again.",
    ),
    RecognitionErrorKind.AUDIO_CAPTURE: (
        NoticeCategory.DEVICE_UNAVAILABLE,
        NoticeLevel.ERROR,
        "Microphone not found or not working.",
    ),
    RecognitionErrorKind.NETWORK: (
        NoticeCategory.NETWORK_FAILURE,
        NoticeLevel.ERROR,
        "Network error occurred during speech recognition.",
    ),
    RecognitionErrorKind.SERVICE_NOT_ALLOWED: (
        NoticeCategory.SERVICE_DISALLOWED,
        NoticeLevel.ERROR,
        "Speech recognition service not allowed.",
    ),
    RecognitionErrorKind.ABORTED: (
        NoticeCategory.ABORTED,
        NoticeLevel.INFO,
        "Speech recognition aborted.",
    ),
}


def notice_for_error(code: str) -> Notice:
    kind = RecognitionErrorKind.from_code(code)
    if kind in _ERROR_NOTICES:
        category, level, message = _ERROR_NOTICES[kind]
        return Notice(category, level, message)
    return Notice(NoticeCategory.RECOGNITION_ERROR, NoticeLevel.ERROR, f"Speech recognition error: {code}")


class SpeechCapture:
    """
    Microphone button logic: owns at most one recognition session and turns its
    final results into TranscriptEvents for on_transcript.

    Platform events are expected on the event-loop thread; each delivery is
    handled synchronously.
    """

    def __init__(
        self,
        *,
        on_transcript: Callable[[TranscriptEvent], None],
        notifier: Notifier,
        capabilities: PlatformCapabilities,
        settings: Optional[RecognitionSettings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.on_transcript = on_transcript
        self.notifier = notifier
        self.capabilities = capabilities
        self.settings = settings or RecognitionSettings()
        self.logger = logger or logging.getLogger(__name__)

        self.tracker = CaptureStateTracker()
        self.permission = PermissionState.PROMPT
        self.interim_transcript = ""
        self._session: Optional[RecognitionSession] = None
        self._unsubscribe_permission: Optional[Callable[[], None]] = None
        self._mounted = False
        self._disposed = False

    @property
    def state(self) -> CaptureState:
        return self.tracker.state

    @property
    def is_supported(self) -> bool:
        return self.tracker.state != CaptureState.UNSUPPORTED

    @property
    def is_listening(self) -> bool:
        return self.tracker.is_listening

    @property
    def has_active_session(self) -> bool:
        return self._session is not None

    def _notify(self, category: NoticeCategory, level: NoticeLevel, message: str) -> None:
        self.notifier.notify(Notice(category, level, message))

    def _log_state(self, reason: str) -> None:
        self.logger.info(
            "capture_state",
            extra={
                "state": self.tracker.state.value,
                "permission": self.permission.value,
                "reason": reason,
            },
        )

    async def mount(self) -> None:
        if self._mounted:
            return
        self._mounted = True

        if not self.capabilities.supports_recognition:
            self.tracker.set_unsupported(UNSUPPORTED_MESSAGE)
            self._log_state("unsupported")
            return

        self.tracker.set_idle()
        if self.capabilities.permissions is not None:
            try:
                status = await self.capabilities.permissions.query()
                self.permission = PermissionState(status.state)
                self._unsubscribe_permission = status.subscribe(self.set_permission)
            except Exception as e:
                self.logger.warning("permission_query_failed", extra={"error": str(e)})
        self._log_state("mounted")

    def set_permission(self, state: PermissionState) -> None:
        self.permission = PermissionState(state)
        self._log_state("permission_changed")

    def explain_permission(self) -> None:
        self._notify(
            NoticeCategory.PERMISSION_HELP,
            NoticeLevel.INFO,
            "Please enable microphone permissions in your system settings and try again.",
        )

    async def _request_permission(self) -> bool:
        self.tracker.set_requesting_permission()
        self._log_state("requesting_permission")
        try:
            if self.capabilities.media is None:
                raise PermissionError("no media access capability")
            await self.capabilities.media.request_microphone()
        except Exception as e:
            self.logger.error("microphone_permission_error", extra={"error": str(e)})
            self.permission = PermissionState.DENIED
            self.tracker.set_error(RecognitionErrorKind.PERMISSION_DENIED, str(e))
            self._log_state("permission_denied")
            self._notify(NoticeCategory.PERMISSION_DENIED, NoticeLevel.ERROR, DENIED_MESSAGE)
            return False
        self.permission = PermissionState.GRANTED
        self.tracker.set_idle()
        return True

    async def start(self) -> None:
        if self._disposed:
            return
        if not self.is_supported or not self.capabilities.supports_recognition:
            self._notify(NoticeCategory.UNSUPPORTED, NoticeLevel.ERROR, UNSUPPORTED_MESSAGE)
            return
        if self.permission == PermissionState.DENIED:
            self._notify(
                NoticeCategory.PERMISSION_DENIED,
                NoticeLevel.ERROR,
                "Microphone access is denied. Please enable microphone permissions in your system settings.",
            )
            return
        if self._session is not None or self.tracker.state in (
            CaptureState.LISTENING,
            CaptureState.REQUESTING_PERMISSION,
        ):
            return

        if self.permission != PermissionState.GRANTED:
            if not await self._request_permission():
                return
            if self._disposed:
                return

        try:
            session = self.capabilities.recognition()  # type: ignore[misc]
            session.configure(self.settings)
            session.subscribe("start", lambda: self._on_start(session))
            session.subscribe("result", lambda event: self._on_result(event))
            session.subscribe("error", lambda code: self._on_error(session, code))
            session.subscribe("end", lambda: self._on_end(session))
            if self._disposed:
                return
            self._session = session
            self.interim_transcript = ""
            session.start()
        except Exception as e:
            self.logger.exception("recognition_start_failed")
            self._session = None
            self.tracker.set_idle()
            self._notify(
                NoticeCategory.START_FAILED,
                NoticeLevel.ERROR,
                f"Failed to start speech recognition: {e}",
            )

    def stop(self) -> None:
        if not self.tracker.is_listening or self._session is None:
            return
        session = self._session
        self._session = None
        session.stop()
        self.tracker.set_idle()
        self._log_state("stopped")
        self._notify(NoticeCategory.RECOGNITION_STOPPED, NoticeLevel.INFO, "Speech recognition stopped")

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        if self._session is not None:
            session = self._session
            self._session = None
            try:
                session.stop()
            except Exception:
                self.logger.exception("recognition_dispose_stop_failed")
        if self._unsubscribe_permission is not None:
            self._unsubscribe_permission()
            self._unsubscribe_permission = None
        self.tracker.set_idle()

    def _on_start(self, session: RecognitionSession) -> None:
        if session is not self._session:
            return
        self.tracker.set_listening()
        self._log_state("session_start")
        self._notify(NoticeCategory.LISTENING_STARTED, NoticeLevel.INFO, "Listening... Speak now")

    def _on_result(self, event: RecognitionResultEvent) -> None:
        # Results from a session that was just stopped are still honoured.
        final_transcript = ""
        interim_transcript = ""
        results = list(event.results)
        for result in results[max(0, int(event.result_index)):]:
            if not result.alternatives:
                continue
            transcript = result.alternatives[0].transcript or ""
            if result.is_final:
                final_transcript += transcript
            else:
                interim_transcript += transcript
        self.interim_transcript = interim_transcript

        text = final_transcript.strip()
        if not text:
            return
        self.logger.info("transcript_final", extra={"chars": len(text)})
        self.on_transcript(TranscriptEvent(text=text, is_final=True))
        self._notify(NoticeCategory.RECOGNITION_SUCCESS, NoticeLevel.SUCCESS, "Speech recognized successfully")

    def _on_error(self, session: RecognitionSession, code: str) -> None:
        kind = RecognitionErrorKind.from_code(code)
        self.logger.error("recognition_error", extra={"code": code, "kind": kind.value})
        if kind == RecognitionErrorKind.PERMISSION_DENIED:
            self.permission = PermissionState.DENIED
        if session is self._session:
            self._session = None
            self.tracker.set_error(kind, code)
            self._log_state("session_error")
        self.notifier.notify(notice_for_error(code))

    def _on_end(self, session: RecognitionSession) -> None:
        if session is not self._session:
            return
        self._session = None
        if self.tracker.is_listening:
            self.tracker.set_idle()
        self._log_state("session_end")
