"""Platform speech-synthesis capability contract.

Architectural role:
    Describes what `eliza.speech.synthesis.SpeechSynthesisWrapper` needs from a
    speech backend: utterance objects, voice enumeration, a voices-changed
    notification, speak/cancel, and a speaking-state flag.

Callback contract:
    A platform reports the outcome of every utterance it accepted exactly once,
    through `utterance.on_end()` or `utterance.on_error(cause)`. An utterance
    removed by `cancel()` reports `on_error("canceled")`. Callbacks may run on
    any thread.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol


CANCELED = "canceled"


@dataclass(frozen=True)
class Voice:
    name: str
    lang: str = ""
    local_service: bool = True
    voice_uri: str = ""
    default: bool = False


@dataclass
class Utterance:
    text: str
    rate: float = 1.0
    pitch: float = 1.0
    volume: float = 1.0
    voice: Optional[Voice] = None
    on_end: Optional[Callable[[], None]] = field(default=None, repr=False)
    on_error: Optional[Callable[[str], None]] = field(default=None, repr=False)


class SpeechPlatform(Protocol):
    @property
    def speaking(self) -> bool: ...

    def get_voices(self) -> List[Voice]: ...

    def add_voices_changed_listener(self, listener: Callable[[], None]) -> None: ...

    def remove_voices_changed_listener(self, listener: Callable[[], None]) -> None: ...

    def speak(self, utterance: Utterance) -> None: ...

    def cancel(self) -> None: ...
