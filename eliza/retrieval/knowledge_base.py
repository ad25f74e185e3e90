"""Static XMRT-DAO knowledge base and relevance filtering.

Architectural role:
    Holds the curated reference snippets injected into direct-assistant prompts
    and selects the entries that are topically relevant to one user input.

Retrieval strategy:
    Lexical only. An entry matches when its category or topic, lower-cased,
    appears as a substring of the lower-cased user input. No scoring and no
    ranking: matches keep knowledge-base order and are capped at `limit`.

Determinism and performance:
    Deterministic for fixed input. Linear scan over a small immutable tuple.
"""

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class KnowledgeEntry:
    category: str
    topic: str
    content: str


XMRT_KNOWLEDGE_BASE = (
    KnowledgeEntry(
        category="mining",
        topic="mobile mining",
        content=(
            "XMRT-DAO miners contribute hash power from mobile devices to a shared "
            "Monero (XMR) pool; rewards accrue as valid shares and are paid out in XMR."
        ),
    ),
    KnowledgeEntry(
        category="mining",
        topic="hash rate",
        content=(
            "Hash rate is measured in hashes per second (H/s). Phones typically produce "
            "tens to a few hundred H/s depending on CPU, temperature and battery state."
        ),
    ),
    KnowledgeEntry(
        category="mining",
        topic="shares",
        content=(
            "A valid share is a proof-of-work result accepted by the pool. Payouts are "
            "proportional to valid shares submitted over the payout window."
        ),
    ),
    KnowledgeEntry(
        category="dao",
        topic="governance",
        content=(
            "XMRT-DAO governance is community driven: token holders propose and vote on "
            "changes, and the autonomous agent executes approved decisions."
        ),
    ),
    KnowledgeEntry(
        category="token",
        topic="xmrt",
        content=(
            "XMRT is the DAO's governance token. It grants voting rights and is distributed "
            "to contributors, including active miners."
        ),
    ),
    KnowledgeEntry(
        category="privacy",
        topic="monero",
        content=(
            "Monero uses ring signatures, stealth addresses and RingCT to hide senders, "
            "receivers and amounts by default."
        ),
    ),
    KnowledgeEntry(
        category="privacy",
        topic="data",
        content=(
            "XMRT-DAO collects no personal data for mining: sessions are identified only by "
            "anonymous worker identifiers."
        ),
    ),
    KnowledgeEntry(
        category="network",
        topic="meshnet",
        content=(
            "The XMRT MESHNET lets devices relay transactions and messages over local mesh "
            "links when internet connectivity is unavailable."
        ),
    ),
    KnowledgeEntry(
        category="security",
        topic="wallet",
        content=(
            "Never share a wallet seed phrase. Mining payouts only require a public XMR "
            "address; no private key ever leaves the user's device."
        ),
    ),
    KnowledgeEntry(
        category="device",
        topic="battery",
        content=(
            "Mine while charging and keep the device cool. The app throttles mining when the "
            "battery is low or the device overheats."
        ),
    ),
)


def find_relevant_knowledge(
    user_input: str,
    entries: Iterable[KnowledgeEntry] = XMRT_KNOWLEDGE_BASE,
    limit: int = 3,
) -> List[KnowledgeEntry]:
    """Return up to `limit` entries whose category or topic occurs in `user_input`.

    Args:
        user_input: Raw user text.
        entries: Knowledge entries to scan, in priority order.
        limit: Maximum number of entries returned.

    Returns:
        Matching entries in their original order.

    Edge cases:
        - Empty input returns no entries.
        - Entries with an empty category/topic never match on that field.
    """
    text = (user_input or "").lower()
    if not text or limit <= 0:
        return []

    matches = []
    for entry in entries:
        category = entry.category.lower()
        topic = entry.topic.lower()
        if (category and category in text) or (topic and topic in text):
            matches.append(entry)
            if len(matches) >= limit:
                break
    return matches
