"""journalbot: JSON-backed journals (recommendations, learnings, knowledge base, self monitor) with Markdown reports."""
