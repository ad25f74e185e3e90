"""LLM access package.

Architectural role:
    Provides provider configuration, API key state, structured error types and
    transport adapters used by the assistant client and edge proxy functions.

Module split:
    - `provider_config`: environment-driven endpoints, models and key lookup.
    - `key_manager`: current key selection and health reporting.
    - `client`: Gemini and gateway HTTP transport and response parsing.
    - `errors`: typed failure kinds populated at the point of detection.
"""
