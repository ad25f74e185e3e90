"""Speech package.

Module split:
    - `platform`: speech capability contract (`SpeechPlatform`, `Voice`, `Utterance`).
    - `synthesis`: `SpeechSynthesisWrapper`, cancel-then-replace playback.
    - `pyttsx3_platform`: default local backend built on pyttsx3.
"""
