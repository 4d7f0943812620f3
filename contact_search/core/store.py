from typing import List, Optional

from .contact import Contact


class ContactStore:
    """In-memory contact storage used when no database is configured.

    Each store instance owns its own contacts, so services receive it as a
    dependency instead of sharing module state.
    """

    def __init__(self, contacts: Optional[List[Contact]] = None):
        self._contacts: List[Contact] = []
        for contact in contacts or []:
            self.add(contact)

    @classmethod
    def with_sample_data(cls) -> 'ContactStore':
        """Create a store seeded with the development contacts"""
        return cls([
            Contact(
                name="John Doe",
                email="john@example.com",
                phone="123-456-7890",
                company="Acme Inc",
                title="CEO",
                notes="Met at conference",
                group="Client",
                tags=["important", "sales"],
            ),
            Contact(
                name="Jane Smith",
                email="jane@example.com",
                phone="987-654-3210",
                company="Tech Solutions",
                title="CTO",
                notes="Technical partner",
                group="Partner",
                tags=["technical", "development"],
            ),
        ])

    def all(self) -> List[Contact]:
        """Return every stored contact in insertion order"""
        return list(self._contacts)

    def get(self, contact_id: int) -> Optional[Contact]:
        for contact in self._contacts:
            if contact.id == contact_id:
                return contact
        return None

    def add(self, contact: Contact) -> Contact:
        """Store a contact, assigning the next free id when it has none"""
        if contact.id is None:
            contact.id = self._next_id()
        elif self.get(contact.id) is not None:
            raise ValueError(f"Contact with id {contact.id} already exists")
        self._contacts.append(contact)
        return contact

    def update(self, contact_id: int, **fields) -> Optional[Contact]:
        contact = self.get(contact_id)
        if contact is None:
            return None
        for field, value in fields.items():
            if field == "id" or not hasattr(contact, field):
                raise ValueError(f"Cannot update field: {field}")
            setattr(contact, field, value)
        return contact

    def delete(self, contact_id: int) -> bool:
        contact = self.get(contact_id)
        if contact is None:
            return False
        self._contacts.remove(contact)
        return True

    def _next_id(self) -> int:
        return max((c.id for c in self._contacts if isinstance(c.id, int)), default=0) + 1

    def __len__(self) -> int:
        return len(self._contacts)
