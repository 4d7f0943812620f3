from typing import Dict, List

import vobject

from ..core.contact import Contact
from ..settings import DEFAULT_ENCODING


class VCardHandler:
    """Handles reading and writing contacts in vCard format"""

    def read_vcard(self, filepath: str) -> List[Contact]:
        """Read contacts from vCard file"""
        contacts = []
        with open(filepath, "r", encoding=DEFAULT_ENCODING) as f:
            vcards = vobject.readComponents(f.read())
            for vcard in vcards:
                contact_data = self._parse_vcard(vcard)
                contacts.append(Contact.from_dict(contact_data))
        return contacts

    def write_vcard(self, contacts: List[Contact], filepath: str) -> None:
        """Write contacts to vCard file"""
        with open(filepath, "w", encoding=DEFAULT_ENCODING) as f:
            for contact in contacts:
                vcard = self._create_vcard(contact)
                f.write(vcard.serialize())

    def _parse_vcard(self, vcard: vobject.vCard) -> Dict:
        """Convert vCard to contact dictionary"""
        data = {
            "name": self._get_vcard_value(vcard, "fn"),
            "email": self._first(self._get_vcard_values(vcard, "email")),
            "phone": self._first(self._get_vcard_values(vcard, "tel")),
            "company": self._get_vcard_value(vcard, "org"),
            "title": self._get_vcard_value(vcard, "title"),
            "notes": self._get_vcard_value(vcard, "note"),
            "tags": self._get_vcard_value(vcard, "categories"),
        }

        # Fall back to the structured name when FN is missing
        if not data["name"] and hasattr(vcard, "n") and vcard.n.value:
            data["name"] = " ".join(filter(None, [vcard.n.value.given, vcard.n.value.family]))

        return data

    def _create_vcard(self, contact: Contact) -> vobject.vCard:
        """Convert contact to vCard object"""
        vcard = vobject.vCard()

        self._add_vcard_field(vcard, "fn", contact.name or "Unknown Contact")
        given, _, family = (contact.name or "").rpartition(" ")
        vcard.add("n")
        vcard.n.value = vobject.vcard.Name(family=family, given=given)

        self._add_vcard_field(vcard, "email", contact.email)
        self._add_vcard_field(vcard, "tel", contact.phone)
        if contact.company:
            vcard.add("org")
            vcard.org.value = [contact.company]
        self._add_vcard_field(vcard, "title", contact.title)
        self._add_vcard_field(vcard, "note", contact.notes)
        if contact.tags:
            vcard.add("categories")
            vcard.categories.value = list(contact.tags)

        return vcard

    @staticmethod
    def _get_vcard_value(vcard: vobject.vCard, field: str):
        """Safely get single value from vCard field"""
        if not hasattr(vcard, field):
            return None
        value = getattr(vcard, field).value
        # ORG holds organization units, CATEGORIES a tag list
        if isinstance(value, list):
            if field == "categories":
                return value
            return " ".join(v for v in value if v) or None
        return value or None

    @staticmethod
    def _get_vcard_values(vcard: vobject.vCard, field: str) -> List[str]:
        """Safely get multiple values from vCard field"""
        values = []
        if hasattr(vcard, field):
            for f in getattr(vcard, f"{field}_list"):
                if f.value:
                    values.append(f.value)
        return values

    @staticmethod
    def _first(values: List[str]):
        return values[0] if values else None

    @staticmethod
    def _add_vcard_field(vcard: vobject.vCard, field: str, value: str) -> None:
        """Add field to vCard"""
        if value:
            vcard.add(field)
            getattr(vcard, field).value = value
