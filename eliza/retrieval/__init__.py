"""Retrieval package.

Architectural role:
    Provides the static XMRT-DAO knowledge base and the lexical relevance filter
    used when assembling direct-assistant prompts.

Scope:
    - `knowledge_base`: immutable knowledge entries and `find_relevant_knowledge`.
"""
