"""Core assistant package.

Architectural role:
    Exposes the request layer that sits between API/CLI entrypoints and the
    lower-level subsystems (retrieval, prompting, LLM adapters).

Composition:
    - `context`: per-request conversation context schema.
    - `assistant`: direct Gemini assistant client.

Package import itself is side-effect free.
"""
