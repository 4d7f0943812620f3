import logging
from typing import List, Optional

from .contact import Contact
from .ranker import ContactRanker
from .store import ContactStore

logger = logging.getLogger(__name__)


class ContactSearch:
    """Answers contact search requests from a store of candidates"""

    def __init__(
        self,
        store: ContactStore,
        ranker: Optional[ContactRanker] = None,
        max_candidates: Optional[int] = None,
    ):
        if max_candidates is not None and max_candidates < 1:
            raise ValueError("max_candidates must be a positive number")
        self.store = store
        self.ranker = ranker or ContactRanker()
        self.max_candidates = max_candidates

    def search(self, query: Optional[str]) -> List[Contact]:
        """Return contacts matching query, or every contact for an empty query"""
        contacts = self.store.all()
        if not query or not query.strip():
            return contacts

        if self.max_candidates is not None and len(contacts) > self.max_candidates:
            logger.warning(
                f"Searching only the first {self.max_candidates} of {len(contacts)} contacts"
            )
            contacts = contacts[:self.max_candidates]

        return self.ranker.rank(query, contacts)
