import threading
import time
import unittest
from types import SimpleNamespace
from unittest.mock import patch

from eliza.speech.platform import Utterance
from eliza.speech.pyttsx3_platform import Pyttsx3Platform, to_voice


class _FakeEngine:
    def __init__(self):
        self.properties = {
            "voices": [
                SimpleNamespace(id="voice-de", name="German", languages=["de_DE"]),
                SimpleNamespace(id="voice-en", name="English", languages=[b"\x05en-us"]),
            ],
            "rate": 200,
        }
        self.said = []

    def getProperty(self, name):
        return self.properties.get(name)

    def setProperty(self, name, value):
        self.properties[name] = value

    def say(self, text):
        self.said.append(text)

    def runAndWait(self):
        pass

    def stop(self):
        pass


def _wait_for(predicate, timeout=1.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


class TestVoiceConversion(unittest.TestCase):
    def test_language_tags_are_normalized(self):
        self.assertEqual(to_voice(SimpleNamespace(id="a", name="A", languages=[b"\x05en-us"])).lang, "en-us")
        self.assertEqual(to_voice(SimpleNamespace(id="b", name="B", languages=["en_GB"])).lang, "en-GB")
        voice = to_voice(SimpleNamespace(id="c", name="", languages=[]))
        self.assertEqual(voice.name, "c")
        self.assertEqual(voice.lang, "")
        self.assertTrue(voice.local_service)


class TestPyttsx3Platform(unittest.TestCase):
    def test_plays_utterance_with_voice_and_scaled_rate(self):
        engine = _FakeEngine()
        with patch("eliza.speech.pyttsx3_platform.pyttsx3.init", return_value=engine):
            platform = Pyttsx3Platform()
            try:
                self.assertTrue(_wait_for(lambda: len(platform.get_voices()) == 2))

                done = threading.Event()
                english = platform.get_voices()[1]
                platform.speak(Utterance(text="hello", rate=0.9, voice=english, on_end=done.set))

                self.assertTrue(done.wait(1.0))
                self.assertEqual(engine.said, ["hello"])
                self.assertEqual(engine.properties["rate"], 180)
                self.assertEqual(engine.properties["voice"], "voice-en")
            finally:
                platform.shutdown()

    def test_utterance_dequeued_before_cancel_is_not_played(self):
        engine = _FakeEngine()
        with patch("eliza.speech.pyttsx3_platform.pyttsx3.init", return_value=engine):
            platform = Pyttsx3Platform()
            self.assertTrue(_wait_for(lambda: len(platform.get_voices()) == 2))
            platform.shutdown()
            platform._thread.join(1.0)

            # The worker took this utterance off the queue, then cancel() ran.
            generation = platform._generation
            platform.cancel()
            errors, ended = [], []
            platform._play(
                engine,
                generation,
                Utterance(text="superseded", on_error=errors.append, on_end=lambda: ended.append(True)),
            )

            self.assertEqual(errors, ["canceled"])
            self.assertEqual(ended, [])
            self.assertEqual(engine.said, [])

    def test_engine_failure_reports_errors(self):
        with patch("eliza.speech.pyttsx3_platform.pyttsx3.init", side_effect=RuntimeError("no driver")):
            platform = Pyttsx3Platform()
            try:
                errors = []
                self.assertTrue(_wait_for(lambda: platform._unavailable))
                platform.speak(Utterance(text="hello", on_error=errors.append))
                self.assertEqual(errors, ["engine-unavailable"])
            finally:
                platform.shutdown()


if __name__ == "__main__":
    unittest.main()
