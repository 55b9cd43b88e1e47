from journalbot.journals.knowledge_base import CategoryRule, KnowledgeBase, shared_words
from journalbot.ledger import MemoryStore

import pytest


def test_categorize_default_rules():
    kb = KnowledgeBase(MemoryStore())
    assert kb.categorize("Python script tips") == "technical"
    assert kb.categorize("Marketing plan") == "business"
    assert kb.categorize("Prefers proactive help") == "preferences"
    assert kb.categorize("How to improve answers") == "self_improvement"
    assert kb.categorize("Weekend plans") == "personal"


def test_custom_rules_first_match_wins():
    rules = [CategoryRule(category="business", keywords=["etsy"]), CategoryRule(category="technical", keywords=["etsy api"])]
    kb = KnowledgeBase(MemoryStore(), rules=rules)
    assert kb.categorize("Etsy API limits") == "business"


def test_unknown_rule_category_rejected():
    with pytest.raises(ValueError):
        KnowledgeBase(MemoryStore(), rules=[CategoryRule(category="hobbies", keywords=["x"])])


def test_add_learning_links_related_entries():
    store = MemoryStore()
    kb = KnowledgeBase(store)
    a = kb.add_learning("values independence at work", "Wants tools to run alone")
    b = kb.add_learning("independence at home", "Likes self-serve setups")
    c = kb.add_learning("creative surprises", "Enjoys unprompted builds")
    assert kb.get(a).related == [b]
    assert kb.get(b).related == [a]
    assert kb.get(c).related == []
    assert kb.stats.total == 3
    assert store.saves == 3
    # relinking adds nothing new
    assert kb.link_related() == 0


def test_shared_words_case_insensitive():
    assert shared_words("Etsy SEO Tips", "etsy seo") == 2
    assert shared_words("a b", "c d") == 0


def test_search_and_mark_used():
    kb = KnowledgeBase(MemoryStore())
    a = kb.add_learning("Business focus", "Two ventures in progress")
    kb.add_learning("Code review habits", "Small diffs")
    assert [e.id for e in kb.search("VENTURES")] == [a]
    assert [e.id for e in kb.search("business")] == [a]
    kb.mark_used(a)
    assert kb.get(a).used == 1


def test_round_trip(tmp_path):
    from journalbot.ledger import JsonFileStore

    path = str(tmp_path / "kb.json")
    kb = KnowledgeBase(JsonFileStore(path))
    kb.add_learning("API automation", "Cron plus scripts")
    again = KnowledgeBase(JsonFileStore(path))
    assert again.to_document() == kb.to_document()
    assert len(again.partition("technical")) == 1
