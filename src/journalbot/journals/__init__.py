"""Journals built on the partitioned ledger."""

from .knowledge_base import KnowledgeBase, KnowledgeEntry
from .learning_log import Insight, LearningLog
from .self_monitor import SelfMonitor

__all__ = ["Insight", "KnowledgeBase", "KnowledgeEntry", "LearningLog", "SelfMonitor"]
