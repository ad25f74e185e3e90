"""
Interactive CLI entrypoint for the Eliza assistant.

Architectural role:
- Provides a terminal-only interface over `DirectAssistantClient`.
- Optionally speaks replies through `SpeechSynthesisWrapper`.

Request lifecycle (per user turn):
1. Read a single line from stdin.
2. Handle local control commands (`exit`/`quit`, `clear chat`, `/key`,
   `/status`, `/speak`).
3. Forward regular prompts with the session history to the assistant.
4. Print the reply (and speak it when speech is on).

Error handling strategy:
- `AssistantError` is shown as its user-facing message; the loop continues.
- EOF and keyboard interrupts end the session without tracebacks.

Side effects:
- Keeps the session history in memory only.
"""

import argparse
import asyncio
import logging
import sys

from eliza.core.assistant import DirectAssistantClient
from eliza.core.context import ConversationContext
from eliza.llm.errors import AssistantError
from eliza.llm.key_manager import ApiKeyManager
from eliza.speech.synthesis import SpeechSynthesisError, SpeechSynthesisWrapper


logger = logging.getLogger(__name__)

HISTORY_KEEP = 50


# =========================================================
# UTF-8 SAFE STDOUT
# =========================================================

if hasattr(sys.stdout, "reconfigure"):
    try:
        sys.stdout.reconfigure(encoding="utf-8", errors="ignore")
    except (OSError, ValueError):
        pass


def build_speech(enabled: bool) -> SpeechSynthesisWrapper:
    """Create the speech wrapper; pyttsx3 is only loaded when speech is on."""
    if not enabled:
        return SpeechSynthesisWrapper(None)

    from eliza.speech.pyttsx3_platform import Pyttsx3Platform

    return SpeechSynthesisWrapper(Pyttsx3Platform())


class ChatSession:
    """Terminal chat state: history, founder flag, speech toggle."""

    def __init__(self, assistant: DirectAssistantClient, speech: SpeechSynthesisWrapper, founder=False):
        self.assistant = assistant
        self.speech = speech
        self.founder = founder
        self.speak_replies = speech.platform is not None
        self.history = []

    def context(self) -> ConversationContext:
        return ConversationContext.from_payload(
            {
                "userContext": {"isFounder": self.founder, "ip": "cli"},
                "conversationHistory": {"recentMessages": list(self.history)},
            }
        )

    def remember(self, sender: str, content: str) -> None:
        self.history.append({"sender": sender, "content": content})
        del self.history[:-HISTORY_KEEP]

    async def ask(self, question: str) -> str:
        reply = await asyncio.to_thread(self.assistant.generate_response, question, self.context())
        self.remember("user", question)
        self.remember("assistant", reply)
        return reply

    async def handle_command(self, text: str) -> bool:
        """Handle local commands; return `True` when `text` was one."""
        lowered = text.lower()

        if lowered in ("empty chat", "clear chat"):
            self.history.clear()
            self.speech.stop()
            print("Chat cleared.")
            return True

        if lowered.startswith("/key"):
            parts = text.split(maxsplit=1)
            self.assistant.key_manager.set_user_key(parts[1] if len(parts) > 1 else None)
            print("API key updated." if len(parts) > 1 else "User API key cleared.")
            return True

        if lowered == "/status":
            status = self.assistant.get_status()
            print(f"Available: {status.available} | key: {status.key_type}")
            print(f"Speech: {self.speech.get_capabilities()}")
            return True

        if lowered.startswith("/speak"):
            parts = lowered.split()
            if self.speech.platform is None:
                print("Speech is not enabled (start with --speak).")
            elif len(parts) > 1 and parts[1] in ("on", "off"):
                self.speak_replies = parts[1] == "on"
                if not self.speak_replies:
                    self.speech.stop()
                print(f"Speech {'on' if self.speak_replies else 'off'}.")
            else:
                print("Usage: /speak on|off")
            return True

        return False


async def run(session: ChatSession) -> None:
    print("Eliza started. (Type 'exit' to quit)\n")
    print("-" * 60)

    while True:

        try:
            question = (await asyncio.to_thread(input, "You: ")).strip()

        except EOFError:
            print("\nSession ended.")
            break

        except KeyboardInterrupt:
            print("\nInterrupted.")
            break

        if not question:
            continue

        if question.lower() in ("exit", "quit"):
            session.speech.stop()
            print("Shutting down.")
            break

        if await session.handle_command(question):
            continue

        try:
            reply = await session.ask(question)
        except AssistantError as err:
            print(f"\n[{err.kind.value}] {err.message}\n")
            continue

        print(f"\nEliza: {reply}\n")

        if session.speak_replies:
            try:
                await session.speech.speak(reply)
            except SpeechSynthesisError as err:
                print(f"(speech failed: {err.cause})")

        print("-" * 60 + "\n")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Chat with Eliza from the terminal.")
    parser.add_argument("--speak", action="store_true", help="speak replies aloud")
    parser.add_argument("--founder", action="store_true", help="mark the session as founder")
    parser.add_argument("--verbose", action="store_true", help="enable info logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s :: %(message)s",
    )

    assistant = DirectAssistantClient(ApiKeyManager())
    session = ChatSession(assistant, build_speech(args.speak), founder=args.founder)

    try:
        asyncio.run(run(session))
    except KeyboardInterrupt:
        print("\nInterrupted.")


if __name__ == "__main__":
    main()
