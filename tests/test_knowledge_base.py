import unittest

from eliza.retrieval.knowledge_base import XMRT_KNOWLEDGE_BASE, KnowledgeEntry, find_relevant_knowledge


_ENTRIES = (
    KnowledgeEntry(category="mining", topic="hash rate", content="c1"),
    KnowledgeEntry(category="mining", topic="shares", content="c2"),
    KnowledgeEntry(category="dao", topic="governance", content="c3"),
    KnowledgeEntry(category="mining", topic="pools", content="c4"),
    KnowledgeEntry(category="privacy", topic="monero", content="c5"),
)


class TestFindRelevantKnowledge(unittest.TestCase):
    def test_matches_category_or_topic_case_insensitively(self):
        hits = find_relevant_knowledge("How does DAO GOVERNANCE work?", _ENTRIES)
        self.assertEqual([h.content for h in hits], ["c3"])

        hits = find_relevant_knowledge("Is Monero private?", _ENTRIES)
        self.assertEqual([h.content for h in hits], ["c5"])

    def test_caps_results_at_three_in_original_order(self):
        hits = find_relevant_knowledge("tell me about mining", _ENTRIES)
        self.assertEqual([h.content for h in hits], ["c1", "c2", "c4"])

    def test_every_hit_satisfies_substring_match(self):
        text = "mining shares and privacy on the dao"
        hits = find_relevant_knowledge(text, _ENTRIES)
        self.assertLessEqual(len(hits), 3)
        for hit in hits:
            self.assertTrue(hit.category.lower() in text or hit.topic.lower() in text)

    def test_empty_or_unrelated_input_matches_nothing(self):
        self.assertEqual(find_relevant_knowledge("", _ENTRIES), [])
        self.assertEqual(find_relevant_knowledge("what's the weather", _ENTRIES), [])

    def test_default_knowledge_base_is_used(self):
        hits = find_relevant_knowledge("how do I keep my wallet safe?")
        self.assertTrue(hits)
        self.assertTrue(all(h in XMRT_KNOWLEDGE_BASE for h in hits))


if __name__ == "__main__":
    unittest.main()
