"""`SpeechPlatform` implementation backed by pyttsx3.

Threading model:
    pyttsx3 engines are not thread-safe and some drivers must be used from the
    thread that created them, so one daemon worker thread owns the engine. It
    loads the voice list (then fires voices-changed listeners) and plays queued
    utterances one at a time with `runAndWait()`.

Cancellation:
    `cancel()` drops queued utterances and stops the one being played. Both
    report `on_error("canceled")`. Each cancel bumps a generation counter;
    an utterance dequeued under an older generation is reported cancelled
    instead of being played.
"""

import logging
import queue
import threading
from typing import Callable, List

import pyttsx3

from eliza.speech.platform import CANCELED, Utterance, Voice


logger = logging.getLogger(__name__)

_STOP = object()


def _language_tag(raw) -> str:
    """Normalize a pyttsx3 language entry (`b"\\x05en-us"`, `"en_US"`) to `en-US` form."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="ignore")
    text = "".join(ch for ch in str(raw) if ch.isprintable()).strip()
    return text.replace("_", "-")


def to_voice(engine_voice) -> Voice:
    languages = getattr(engine_voice, "languages", None) or []
    lang = _language_tag(languages[0]) if languages else ""
    return Voice(
        name=str(getattr(engine_voice, "name", "") or getattr(engine_voice, "id", "")),
        lang=lang,
        local_service=True,
        voice_uri=str(getattr(engine_voice, "id", "")),
    )


class Pyttsx3Platform:
    def __init__(self, driver_name=None):
        self._driver_name = driver_name
        self._queue = queue.Queue()
        self._lock = threading.Lock()
        self._voices: List[Voice] = []
        self._listeners: List[Callable[[], None]] = []
        self._engine = None
        self._base_rate = 200
        self._current = None
        self._cancel_current = False
        self._generation = 0
        self._speaking = False
        self._unavailable = False
        self._thread = threading.Thread(target=self._run, name="pyttsx3-speech", daemon=True)
        self._thread.start()

    # -----------------------------------------------------
    # SpeechPlatform
    # -----------------------------------------------------

    @property
    def speaking(self) -> bool:
        return self._speaking

    def get_voices(self) -> List[Voice]:
        with self._lock:
            return list(self._voices)

    def add_voices_changed_listener(self, listener):
        with self._lock:
            self._listeners.append(listener)

    def remove_voices_changed_listener(self, listener):
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def speak(self, utterance: Utterance) -> None:
        if self._unavailable:
            _notify(utterance.on_error, "engine-unavailable")
            return
        with self._lock:
            generation = self._generation
        self._queue.put((generation, utterance))

    def cancel(self) -> None:
        dropped = []
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is _STOP:
                self._queue.put(_STOP)
                break
            dropped.append(item[1])

        with self._lock:
            self._generation += 1
            engine = self._engine
            playing = self._current is not None
            if playing:
                self._cancel_current = True

        if playing and engine is not None:
            engine.stop()

        for utterance in dropped:
            _notify(utterance.on_error, CANCELED)

    def shutdown(self) -> None:
        self.cancel()
        self._queue.put(_STOP)

    # -----------------------------------------------------
    # Worker thread
    # -----------------------------------------------------

    def _run(self):
        try:
            engine = pyttsx3.init(self._driver_name)
            voices = [to_voice(v) for v in engine.getProperty("voices") or []]
            base_rate = engine.getProperty("rate") or self._base_rate
        except Exception:
            logger.exception("Failed to initialize pyttsx3 engine")
            self._unavailable = True
            self._fail_pending("engine-unavailable")
            return

        with self._lock:
            self._engine = engine
            self._voices = voices
            self._base_rate = base_rate
            listeners = list(self._listeners)

        logger.info("pyttsx3 engine ready with %d voices", len(voices))
        for listener in listeners:
            _notify(listener)

        while True:
            item = self._queue.get()
            if item is _STOP:
                break
            self._play(engine, *item)

    def _play(self, engine, generation: int, utterance: Utterance):
        with self._lock:
            stale = generation != self._generation
            if not stale:
                self._current = utterance
                self._cancel_current = False

        # Cancelled between dequeue and playback.
        if stale:
            _notify(utterance.on_error, CANCELED)
            return

        cause = None
        try:
            engine.setProperty("rate", int(round(self._base_rate * utterance.rate)))
            engine.setProperty("volume", utterance.volume)
            if utterance.voice is not None and utterance.voice.voice_uri:
                engine.setProperty("voice", utterance.voice.voice_uri)
            with self._lock:
                skip = self._cancel_current
            if not skip:
                engine.say(utterance.text)
                self._speaking = True
                engine.runAndWait()
        except Exception:
            logger.exception("pyttsx3 playback failed")
            cause = "synthesis-failed"
        finally:
            self._speaking = False

        with self._lock:
            canceled = self._cancel_current
            self._current = None
            self._cancel_current = False

        if canceled:
            _notify(utterance.on_error, CANCELED)
        elif cause is not None:
            _notify(utterance.on_error, cause)
        else:
            _notify(utterance.on_end)

    def _fail_pending(self, cause: str):
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return
            if item is not _STOP:
                _notify(item[1].on_error, cause)


def _notify(callback, *args):
    if callback is None:
        return
    try:
        callback(*args)
    except Exception:
        logger.exception("Speech callback failed")
