"""Edge proxy functions.

Each module exposes one `router` with a single POST route that forwards a
chat request to the hosted AI gateway:

- `gemini_chat`: context-aware prompt, last 10 messages, structured errors.
- `deepseek_chat`: minimal prompt, last 3 coerced messages, flat errors.
- `openai_chat`: pass-through parameters with validation, usage and model echo.
"""
