"""Knowledge-base collaborator providing brand and writing guidelines."""
from __future__ import annotations

import abc
from typing import Dict, Iterable, List, Sequence


class KnowledgeBase(abc.ABC):
    """Source of guideline text for a set of knowledge-base ids."""

    @abc.abstractmethod
    async def get_context(self, knowledge_base_ids: Sequence[str], query: str) -> str:
        """Return guideline text relevant to ``query`` from the given knowledge bases."""


class InMemoryKnowledgeBase(KnowledgeBase):
    """Holds guideline documents per knowledge-base id and returns them verbatim."""

    def __init__(self) -> None:
        self._documents: Dict[str, List[str]] = {}

    def add_documents(self, knowledge_base_id: str, documents: Iterable[str]) -> None:
        self._documents.setdefault(knowledge_base_id, []).extend(documents)

    async def get_context(self, knowledge_base_ids: Sequence[str], query: str) -> str:
        sections = []
        for kb_id in knowledge_base_ids:
            documents = self._documents.get(kb_id)
            if documents:
                sections.append("\n".join(documents))
        return "\n\n".join(sections)
