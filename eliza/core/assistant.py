"""Direct assistant client: context-aware prompting against the Gemini API.

Architectural role:
    Transforms one user input plus optional conversation context into a single
    Gemini `generateContent` call and returns the model's trimmed text.

Control-flow model:
    1. Lazily construct the generative client from the key manager's current
       key; the client is memoized on this instance for its lifetime.
    2. Select up to 3 relevant knowledge entries.
    3. Assemble the prompt (system prompt, knowledge, last 5 turns, new turn).
    4. Invoke the model with fixed sampling parameters.
    5. Report key health and return the text, or raise a typed error.

Error handling strategy:
    Failures surface as `AssistantError` with an explicit `kind`:
    - `NO_API_KEY` when no key is configured or the client cannot be built,
    - `EMPTY_RESPONSE` when the model returns blank text,
    - `QUOTA_EXCEEDED` / `INVALID_API_KEY` / `PERMISSION_DENIED` as classified
      by `eliza.llm.client` from the HTTP reply.
    Transport exceptions propagate unchanged. No retries.

Side effects:
    Memoizes the client handle; reports key health to the key manager.
"""

import logging
import threading
from dataclasses import dataclass

from eliza.core.context import ConversationContext
from eliza.llm.client import GenerativeClient
from eliza.llm.errors import AssistantError, AssistantErrorKind
from eliza.llm.key_manager import ApiKeyManager
from eliza.llm.provider_config import DIRECT_GENERATION_CONFIG, DIRECT_MODEL_NAME
from eliza.prompting.prompt_builder import build_direct_prompt
from eliza.retrieval.knowledge_base import XMRT_KNOWLEDGE_BASE, find_relevant_knowledge


logger = logging.getLogger(__name__)

KNOWLEDGE_LIMIT = 3


@dataclass(frozen=True)
class ServiceStatus:
    available: bool
    key_type: str


class DirectAssistantClient:
    """Gemini-backed assistant bound to one key manager.

    Args:
        key_manager: Key provider (`get_current_api_key`, `mark_key_as_working`,
            `get_key_status`).
        client_factory: Callable `api_key -> client` exposing `get_model`.
        knowledge_base: Knowledge entries scanned for each input.
        model_name: Gemini model identifier.
        generation_config: Sampling parameters forwarded to the model.
    """

    def __init__(
        self,
        key_manager: ApiKeyManager,
        client_factory=GenerativeClient,
        knowledge_base=XMRT_KNOWLEDGE_BASE,
        model_name: str = DIRECT_MODEL_NAME,
        generation_config: dict | None = None,
    ):
        self.key_manager = key_manager
        self.client_factory = client_factory
        self.knowledge_base = tuple(knowledge_base)
        self.model_name = model_name
        self.generation_config = dict(generation_config or DIRECT_GENERATION_CONFIG)
        self._client = None
        self._init_lock = threading.Lock()

    def _initialize(self) -> bool:
        if self._client is not None:
            return True

        with self._init_lock:
            if self._client is not None:
                return True

            api_key = self.key_manager.get_current_api_key()
            if not api_key:
                logger.warning("No Gemini API key available for direct service")
                return False

            try:
                self._client = self.client_factory(api_key)
            except Exception:
                logger.exception("Failed to initialize Gemini direct service")
                return False

        logger.info("Gemini direct service initialized")
        return True

    def generate_response(self, user_input: str, context: ConversationContext | dict | None = None) -> str:
        """Generate one assistant reply.

        Args:
            user_input: New user turn.
            context: `ConversationContext`, a JSON-like dict, or `None`.

        Returns:
            Stripped, non-empty model text.

        Raises:
            AssistantError: Typed failure (see module docstring).
        """
        if not isinstance(context, ConversationContext):
            context = ConversationContext.from_payload(context)

        if not self._initialize():
            raise AssistantError(AssistantErrorKind.NO_API_KEY)

        knowledge = find_relevant_knowledge(user_input, self.knowledge_base, limit=KNOWLEDGE_LIMIT)
        prompt = build_direct_prompt(user_input, context, knowledge)

        model = self._client.get_model(self.model_name, self.generation_config)

        logger.info("Sending request to Gemini API (model=%s, knowledge=%d)", self.model_name, len(knowledge))
        try:
            response = model.generate_content(prompt)
        except AssistantError as err:
            logger.error("Gemini direct service error: %s (%s)", err.kind.value, err.detail)
            if err.kind == AssistantErrorKind.INVALID_API_KEY:
                self.key_manager.mark_key_as_failed()
            raise

        text = response.text() if response is not None else ""
        if not text or not text.strip():
            raise AssistantError(AssistantErrorKind.EMPTY_RESPONSE)

        self.key_manager.mark_key_as_working()
        return text.strip()

    def is_available(self) -> bool:
        return self._initialize()

    def get_status(self) -> ServiceStatus:
        status = self.key_manager.get_key_status()
        return ServiceStatus(available=status.is_valid, key_type=status.key_type)
