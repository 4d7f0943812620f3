from typing import Dict, List, Optional

# Standard field name -> accepted spellings from CRM exports and address books
FIELD_ALIASES: Dict[str, List[str]] = {
    "id": ["id", "ID", "Id"],
    "name": ["name", "Name", "Full Name", "DisplayName", "Display Name"],
    "email": ["email", "Email", "E-mail", "E-mail Address", "Primary Email"],
    "phone": ["phone", "Phone", "Telephone", "Mobile", "Primary Phone"],
    "company": ["company", "Company", "Organization", "Business"],
    "title": ["title", "Title", "Job Title", "Role"],
    "notes": ["notes", "Notes", "Note"],
    "group": ["group", "Group", "Category"],
    "tags": ["tags", "Tags", "Categories"],
}


class Contact:
    def __init__(self, name="", email=None, phone=None, company=None, title=None, notes=None, group=None, tags=None, id=None):
        self.id = id
        self.name = name
        self.email = email
        self.phone = phone
        self.company = company
        self.title = title
        self.notes = notes
        self.group = group
        self.tags = tags if tags is not None else []

    @classmethod
    def from_dict(cls, data: Dict) -> 'Contact':
        """Create a Contact instance from a dictionary using any known field alias"""
        values = {}
        for field, aliases in FIELD_ALIASES.items():
            for alias in aliases:
                if data.get(alias) not in (None, ""):
                    values[field] = data[alias]
                    break

        tags = values.get("tags", [])
        if isinstance(tags, str):
            tags = [t.strip() for t in tags.replace(";", ",").split(",") if t.strip()]
        values["tags"] = list(tags)

        return cls(**values)

    def to_dict(self) -> Dict:
        """Convert contact to dictionary with standardized field names"""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'company': self.company,
            'title': self.title,
            'notes': self.notes,
            'group': self.group,
            'tags': list(self.tags),
        }

    def get_field(self, field: str) -> Optional[str]:
        """Return a field value, or None when the contact has no such field"""
        return getattr(self, field, None)

    def __repr__(self) -> str:
        return f"Contact(id={self.id!r}, name={self.name!r}, email={self.email!r})"
