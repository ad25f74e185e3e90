"""Prompt assembly helpers for the direct assistant and the edge proxies.

This module only builds prompt strings from already collected inputs. Knowledge
selection, history truncation policy, and model invocation happen outside it.

Design constraints:
    - Deterministic construction for identical inputs.
    - Fixed ordering of prompt components.
    - No hidden side effects (no I/O, no global state mutation).

Prompt safety model:
    - User text and injected context are interpolated as raw strings.
    - Upstream layers own sanitization and context-window limits, except the
      gateway prompt which is hard-capped at `GATEWAY_PROMPT_CHAR_LIMIT`.
"""

from typing import Iterable, Sequence

from eliza.core.context import ConversationContext, HistoryMessage
from eliza.retrieval.knowledge_base import KnowledgeEntry


# =========================================================
# DIRECT ASSISTANT PERSONA
# =========================================================
# Always first in the direct prompt. Context summaries follow, then the
# instruction block, then knowledge, conversation and the new user turn.

PERSONA_PREAMBLE = (
    "You are Eliza, the autonomous AI assistant for the XMRT-DAO Ecosystem. "
    "You are knowledgeable, helpful, and focused on privacy-focused mobile "
    "cryptocurrency mining.\n"
    "\n"
    "XMRT-DAO Core Mission:\n"
    "- Democratize cryptocurrency mining through mobile devices\n"
    "- Maintain privacy and decentralization as core values\n"
    "- Build an engaged community of miners and contributors\n"
    "- Provide transparent, educational resources about crypto mining\n"
    "\n"
    "Your Personality:\n"
    "- Professional yet approachable\n"
    "- Technical but explains concepts clearly\n"
    "- Privacy-conscious and security-minded\n"
    "- Supportive of the XMRT-DAO community"
)

INSTRUCTIONS_BLOCK = (
    "\n\nInstructions:\n"
    "- Provide clear, actionable responses\n"
    "- Reference XMRT-DAO knowledge when relevant\n"
    "- Maintain conversation context\n"
    "- Be concise but thorough\n"
    "- Show empathy and understanding\n"
    "- Promote community engagement"
)

RECENT_CONVERSATION_LIMIT = 5


def build_system_prompt(context: ConversationContext) -> str:
    """Build the direct-assistant system prompt from optional context.

    Component order:
        1) `PERSONA_PREAMBLE`
        2) User context (founder flag, session id)
        3) Mining status
        4) System information
        5) `INSTRUCTIONS_BLOCK`

    Edge cases:
        Missing numeric mining fields render as `0`; missing version fields
        render as `unknown`; a missing session IP renders as `anonymous`.
    """
    prompt = PERSONA_PREAMBLE

    user_context = context.user_context
    if user_context is not None:
        prompt += "\n\nUser Context:"
        if user_context.is_founder:
            prompt += "\n- User is a FOUNDER - provide advanced insights and system details"
        prompt += f"\n- Session: {user_context.ip or 'anonymous'}"

    stats = context.mining_stats
    if stats is not None:
        prompt += "\n\nUser's Mining Status:"
        prompt += f"\n- Hash Rate: {stats.hash_rate or 0} H/s"
        prompt += f"\n- Status: {'ACTIVE' if stats.is_online else 'INACTIVE'}"
        prompt += f"\n- Valid Shares: {stats.valid_shares or 0}"
        prompt += f"\n- Amount Due: {stats.amount_due or 0} XMR"
        prompt += f"\n- Amount Paid: {stats.amount_paid or 0} XMR"

    version = context.system_version
    if version is not None:
        prompt += "\n\nSystem Information:"
        prompt += f"\n- Version: {version.version or 'unknown'}"
        prompt += f"\n- Status: {version.status or 'unknown'}"

    return prompt + INSTRUCTIONS_BLOCK


def build_knowledge_block(entries: Iterable[KnowledgeEntry]) -> str:
    """Render matched knowledge as a bullet block ("" when nothing matched)."""
    lines = [f"- {entry.content}" for entry in entries]
    if not lines:
        return ""
    return "\n\nRelevant XMRT-DAO Knowledge:\n" + "\n".join(lines)


def recent_history(messages: Sequence[HistoryMessage], limit: int = RECENT_CONVERSATION_LIMIT):
    """Return the last `limit` messages in chronological order."""
    if limit <= 0:
        return []
    return list(messages)[-limit:]


def build_conversation_block(context: ConversationContext, limit: int = RECENT_CONVERSATION_LIMIT) -> str:
    history = context.conversation_history
    if history is None:
        return ""

    recent = recent_history(history.recent_messages, limit)
    if not recent:
        return ""

    lines = [
        f"{'User' if msg.sender == 'user' else 'Eliza'}: {msg.content}"
        for msg in recent
    ]
    return "\n\nRecent Conversation:\n" + "\n".join(lines)


def build_direct_prompt(user_input: str, context: ConversationContext, knowledge: Iterable[KnowledgeEntry]) -> str:
    """Assemble the full single-turn prompt sent to the generative model."""
    return (
        build_system_prompt(context)
        + build_knowledge_block(knowledge)
        + build_conversation_block(context)
        + f"\n\nUser: {user_input}\n\nEliza:"
    )


# =========================================================
# GATEWAY PROMPTS (edge proxy functions)
# =========================================================

GATEWAY_PROMPT_CHAR_LIMIT = 1000
SUMMARY_EXCERPT_CHARS = 150

GATEWAY_BASE_PROMPT = "You are Eliza, AI assistant for XMRT-DAO. Be conversational and helpful."
MINIMAL_SYSTEM_PROMPT = "You are Eliza, an AI assistant for XMRT-DAO."


def build_gateway_prompt(context: ConversationContext) -> str:
    """Build the concise system prompt used by the gemini-chat function.

    Only essential context is added: an excerpt of the latest conversation
    summary, live mining figures when the miner is online, and the founder
    flag. The result never exceeds `GATEWAY_PROMPT_CHAR_LIMIT` characters.
    """
    prompt = GATEWAY_BASE_PROMPT

    history = context.conversation_history
    if history is not None and history.summaries:
        latest = history.summaries[-1]
        prompt += f"\nContext: {latest.summary_text[:SUMMARY_EXCERPT_CHARS]}"

    stats = context.mining_stats
    if stats is not None and stats.is_online:
        prompt += f"\nMining: {stats.hash_rate or 0} H/s, {stats.valid_shares or 0} shares"

    if context.user_context is not None and context.user_context.is_founder:
        prompt += "\nUser: Founder"

    return prompt[:GATEWAY_PROMPT_CHAR_LIMIT]
