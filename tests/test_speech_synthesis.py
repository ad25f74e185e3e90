import asyncio
import unittest

from eliza.speech.platform import Voice
from eliza.speech.synthesis import SpeechSynthesisError, SpeechSynthesisWrapper, select_voice


_VOICES = [
    Voice(name="Remote French", lang="fr-FR", local_service=False),
    Voice(name="Remote English", lang="en-GB", local_service=False),
    Voice(name="Local English", lang="en-US", local_service=True),
]


class _FakePlatform:
    def __init__(self, voices=None):
        self.voices = list(_VOICES if voices is None else voices)
        self.listeners = []
        self.spoken = []
        self.current = None
        self.speaking = False
        self.cancel_count = 0

    def get_voices(self):
        return list(self.voices)

    def add_voices_changed_listener(self, listener):
        self.listeners.append(listener)

    def remove_voices_changed_listener(self, listener):
        if listener in self.listeners:
            self.listeners.remove(listener)

    def speak(self, utterance):
        self.spoken.append(utterance)
        self.current = utterance
        self.speaking = True

    def cancel(self):
        self.cancel_count += 1
        current, self.current = self.current, None
        self.speaking = False
        if current is not None:
            current.on_error("canceled")

    def finish(self):
        current, self.current = self.current, None
        self.speaking = False
        current.on_end()

    def fail(self, cause):
        current, self.current = self.current, None
        self.speaking = False
        current.on_error(cause)

    def load_voices(self, voices):
        self.voices = list(voices)
        for listener in list(self.listeners):
            listener()


class TestSelectVoice(unittest.TestCase):
    def test_priority_order(self):
        self.assertEqual(select_voice(_VOICES).name, "Local English")
        self.assertEqual(select_voice(_VOICES[:2]).name, "Remote English")
        self.assertEqual(select_voice(_VOICES[:1]).name, "Remote French")
        self.assertIsNone(select_voice([]))


class TestSpeechSynthesisWrapper(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.platform = _FakePlatform()
        self.tts = SpeechSynthesisWrapper(self.platform, start_delay=0.01, voice_load_timeout=0.2)

    async def _started(self, text):
        task = asyncio.create_task(self.tts.speak(text))
        await asyncio.sleep(0.05)
        return task

    async def test_speak_resolves_when_playback_ends(self):
        task = await self._started("hello")

        utterance = self.platform.spoken[-1]
        self.assertEqual(utterance.text, "hello")
        self.assertEqual(utterance.rate, 0.9)
        self.assertEqual(utterance.voice.name, "Local English")
        self.assertTrue(self.tts.is_speaking())

        self.platform.finish()
        await asyncio.wait_for(task, 1)
        self.assertFalse(self.tts.is_speaking())
        self.assertEqual(self.tts.get_last_method(), "Platform Speech API")

    async def test_speed_overrides_rate(self):
        task = await self._started("fast")
        self.assertEqual(self.platform.spoken[-1].rate, 0.9)
        self.platform.finish()
        await task

        task = asyncio.create_task(self.tts.speak("faster", speed=1.4))
        await asyncio.sleep(0.05)
        self.assertEqual(self.platform.spoken[-1].rate, 1.4)
        self.platform.finish()
        await task

    async def test_overlapping_speak_before_start_plays_only_latest(self):
        first = asyncio.create_task(self.tts.speak("hello"))
        await asyncio.sleep(0)
        second = asyncio.create_task(self.tts.speak("world"))
        await asyncio.sleep(0.05)

        self.assertEqual([u.text for u in self.platform.spoken], ["world"])
        self.assertTrue(first.done())
        self.assertIsNone(first.result())

        self.platform.finish()
        await asyncio.wait_for(second, 1)

    async def test_overlapping_speak_during_playback_cancels_first(self):
        first = await self._started("hello")
        second = asyncio.create_task(self.tts.speak("world"))
        await asyncio.sleep(0.05)

        await asyncio.wait_for(first, 1)
        self.assertIs(self.platform.current, self.platform.spoken[-1])
        self.assertEqual(self.platform.current.text, "world")
        self.assertTrue(self.tts.is_speaking())

        self.platform.finish()
        await asyncio.wait_for(second, 1)

    async def test_non_cancel_error_rejects(self):
        task = await self._started("hello")
        self.platform.fail("audio-busy")

        with self.assertRaises(SpeechSynthesisError) as ctx:
            await asyncio.wait_for(task, 1)
        self.assertEqual(ctx.exception.cause, "audio-busy")
        self.assertFalse(self.tts.is_speaking())

    async def test_stop_clears_session_immediately(self):
        task = await self._started("hello")
        self.assertTrue(self.tts.is_speaking())

        self.tts.stop()

        self.assertFalse(self.tts.is_speaking())
        await asyncio.wait_for(task, 1)

    async def test_stop_before_start_prevents_playback(self):
        task = asyncio.create_task(self.tts.speak("hello"))
        await asyncio.sleep(0)
        self.tts.stop()
        await asyncio.wait_for(task, 1)
        await asyncio.sleep(0.03)
        self.assertEqual(self.platform.spoken, [])

    async def test_waits_for_voices_changed_notification(self):
        self.platform.voices = []
        task = asyncio.create_task(self.tts.speak("hello"))
        await asyncio.sleep(0.02)
        self.assertEqual(self.platform.spoken, [])

        self.platform.load_voices(_VOICES[:2])
        await asyncio.sleep(0.05)

        self.assertEqual(self.platform.spoken[-1].voice.name, "Remote English")
        self.assertEqual(self.platform.listeners, [])
        self.platform.finish()
        await asyncio.wait_for(task, 1)

    async def test_voice_wait_times_out_and_speaks_without_voice(self):
        self.platform.voices = []
        tts = SpeechSynthesisWrapper(self.platform, start_delay=0.01, voice_load_timeout=0.05)
        task = asyncio.create_task(tts.speak("hello"))
        await asyncio.sleep(0.2)

        self.assertEqual(len(self.platform.spoken), 1)
        self.assertIsNone(self.platform.spoken[0].voice)
        self.platform.finish()
        await asyncio.wait_for(task, 1)

    async def test_unsupported_platform_returns_quietly(self):
        tts = SpeechSynthesisWrapper(None)
        self.assertIsNone(await tts.speak("hello"))
        self.assertFalse(tts.is_speaking())
        self.assertEqual(
            tts.get_capabilities(),
            {"remote": False, "platform_speech": False, "fallback": True},
        )
        self.assertTrue(self.tts.get_capabilities()["platform_speech"])


if __name__ == "__main__":
    unittest.main()
