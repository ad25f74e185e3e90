"""Speech synthesis wrapper with cancel-then-replace playback.

Architectural role:
    Gives UI/CLI layers one call, `await speak(text)`, over a platform speech
    capability (`eliza.speech.platform.SpeechPlatform`).

Playback model:
    - At most one utterance session is held at a time. A new `speak` call (or
      `stop`) interrupts the held session before anything else happens; the
      interrupted call resolves normally. There is no queue.
    - Playback is requested `start_delay` seconds after scheduling so that the
      platform's cancel has settled.
    - Platform callbacks may arrive on foreign threads; they are marshalled onto
      the event loop with `call_soon_threadsafe`.

Error handling strategy:
    - An unsupported platform (`platform=None`) is logged and `speak` returns.
    - `canceled` playback errors resolve the call.
    - Any other playback error raises `SpeechSynthesisError`.
"""

import asyncio
import logging
from typing import List, Optional

from eliza.speech.platform import CANCELED, SpeechPlatform, Utterance, Voice


logger = logging.getLogger(__name__)

PLATFORM_METHOD = "Platform Speech API"
DEFAULT_RATE = 0.9
START_DELAY = 0.05
VOICE_LOAD_TIMEOUT = 1.0


class SpeechSynthesisError(Exception):
    def __init__(self, cause: str):
        self.cause = cause
        super().__init__(f"Speech synthesis error: {cause}")


def select_voice(voices: List[Voice]) -> Optional[Voice]:
    """Pick a voice: local English, then any English, then the first voice."""
    if not voices:
        return None

    english = [v for v in voices if (v.lang or "").lower().startswith("en")]
    for voice in english:
        if voice.local_service:
            return voice
    if english:
        return english[0]
    return voices[0]


class _Session:
    __slots__ = ("utterance", "future", "start_handle")

    def __init__(self, utterance: Utterance, future: asyncio.Future):
        self.utterance = utterance
        self.future = future
        self.start_handle = None


class SpeechSynthesisWrapper:
    def __init__(
        self,
        platform: Optional[SpeechPlatform],
        start_delay: float = START_DELAY,
        voice_load_timeout: float = VOICE_LOAD_TIMEOUT,
    ):
        self.platform = platform
        self.start_delay = start_delay
        self.voice_load_timeout = voice_load_timeout
        self._session: Optional[_Session] = None
        self._initialized = False
        self._last_method = PLATFORM_METHOD

    async def initialize(self) -> None:
        """Trigger voice loading once; failures are logged, never raised."""
        if self._initialized:
            return

        try:
            await self._load_voices()
            logger.info("Speech synthesis initialized (%s)", PLATFORM_METHOD)
        except Exception:
            logger.warning("Failed to initialize speech synthesis", exc_info=True)
        self._initialized = True

    async def _load_voices(self) -> None:
        """Return once voices are listed, or after `voice_load_timeout` seconds."""
        platform = self.platform
        if platform is None or platform.get_voices():
            return

        loop = asyncio.get_running_loop()
        changed = loop.create_future()

        def _mark_changed():
            if not changed.done():
                changed.set_result(None)

        def on_voices_changed():
            loop.call_soon_threadsafe(_mark_changed)

        platform.add_voices_changed_listener(on_voices_changed)
        try:
            if platform.get_voices():
                return
            await asyncio.wait_for(changed, self.voice_load_timeout)
        except asyncio.TimeoutError:
            logger.debug("No voices-changed notification within %.1fs", self.voice_load_timeout)
        finally:
            platform.remove_voices_changed_listener(on_voices_changed)

    async def speak(self, text: str, speed: Optional[float] = None) -> None:
        """Speak `text`, pre-empting any current utterance.

        Args:
            text: Text to speak.
            speed: Rate multiplier (defaults to 0.9).

        Raises:
            SpeechSynthesisError: Playback failed for a reason other than
                cancellation.
        """
        if not self._initialized:
            await self.initialize()

        if self.platform is None:
            logger.error("Speech synthesis not supported on this platform")
            return

        await self._load_voices()

        self.platform.cancel()
        self._release_session()

        loop = asyncio.get_running_loop()
        utterance = Utterance(text=text, rate=speed or DEFAULT_RATE, pitch=1.0, volume=1.0)

        voice = select_voice(self.platform.get_voices())
        if voice is not None:
            utterance.voice = voice
            logger.info("Using voice: %s", voice.name)

        session = _Session(utterance, loop.create_future())
        utterance.on_end = lambda: loop.call_soon_threadsafe(self._settle, session, None)
        utterance.on_error = lambda cause: loop.call_soon_threadsafe(self._settle, session, cause)

        self._session = session
        session.start_handle = loop.call_later(self.start_delay, self._start, session)

        await session.future

    def _start(self, session: _Session) -> None:
        session.start_handle = None
        if session is not self._session:
            return
        try:
            self.platform.speak(session.utterance)
        except Exception as err:
            logger.exception("Platform speak failed")
            self._settle(session, str(err) or type(err).__name__)

    def _settle(self, session: _Session, cause: Optional[str]) -> None:
        if session is self._session:
            self._session = None

        future = session.future
        if future.done():
            return

        if cause is None:
            self._last_method = PLATFORM_METHOD
            future.set_result(None)
        elif cause == CANCELED:
            future.set_result(None)
        else:
            logger.error("Speech synthesis error: %s", cause)
            future.set_exception(SpeechSynthesisError(cause))

    def _release_session(self) -> None:
        session = self._session
        if session is None:
            return
        self._session = None
        if session.start_handle is not None:
            session.start_handle.cancel()
            session.start_handle = None
        self._settle(session, CANCELED)

    def stop(self) -> None:
        """Cancel playback and drop the held session."""
        if self._session is not None:
            self.platform.cancel()
            self._release_session()

    def is_speaking(self) -> bool:
        return self._session is not None and bool(self.platform.speaking)

    def get_last_method(self) -> str:
        return self._last_method

    def get_capabilities(self) -> dict:
        return {
            "remote": False,
            "platform_speech": self.platform is not None,
            "fallback": True,
        }
