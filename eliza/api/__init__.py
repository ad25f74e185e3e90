"""Eliza API adapter package.

Architectural role:
- Defines the external interaction boundary: the FastAPI edge proxy
  functions (`http_api`, `functions`) and the terminal chat (`cli`).
- Performs transport-level validation and response shaping.
- Delegates model access to the `llm` and `core` layers.
"""
