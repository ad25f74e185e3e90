"""Eliza assistant front end for the XMRT-DAO mining ecosystem.

Package layout:
    - `llm`: provider configuration, API key management, Gemini and gateway
      transport clients, structured error types.
    - `retrieval`: static XMRT-DAO knowledge base and relevance filtering.
    - `prompting`: deterministic prompt assembly.
    - `core`: conversation context schema and the direct assistant client.
    - `api`: FastAPI edge proxy functions and the interactive CLI.
    - `speech`: speech synthesis wrapper over a platform speech capability.
"""
