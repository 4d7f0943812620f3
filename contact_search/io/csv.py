import csv
from typing import Dict, List, Optional

from ..core.contact import FIELD_ALIASES, Contact
from ..settings import DEFAULT_ENCODING


class CSVHandler:
    """Handles reading and writing contacts in CSV format"""

    FIELDNAMES = ["id", "name", "email", "phone", "company", "title", "notes", "group", "tags"]

    def __init__(self, field_map: Optional[Dict[str, List[str]]] = None, encoding: str = DEFAULT_ENCODING):
        self.field_map = field_map or FIELD_ALIASES
        self.encoding = encoding

    def read_csv(self, filepath: str) -> List[Contact]:
        """Read contacts from CSV file"""
        contacts = []
        with open(filepath, "r", encoding=self.encoding, newline="") as csvfile:
            reader = csv.DictReader(csvfile)
            headers = self._normalize_headers(reader.fieldnames or [])

            for row in reader:
                normalized_row = self._normalize_row(row, headers)
                if "id" in normalized_row:
                    normalized_row["id"] = self._parse_id(normalized_row["id"])
                contacts.append(Contact.from_dict(normalized_row))

        return contacts

    def write_csv(self, contacts: List[Contact], filepath: str) -> None:
        """Write contacts to CSV file, one row per contact in list order"""
        with open(filepath, "w", encoding=self.encoding, newline="") as csvfile:
            writer = csv.DictWriter(csvfile, fieldnames=self.FIELDNAMES)
            writer.writeheader()

            for contact in contacts:
                row = contact.to_dict()
                row["tags"] = ", ".join(row["tags"])
                writer.writerow({k: ("" if v is None else v) for k, v in row.items()})

    def _normalize_headers(self, headers: List[str]) -> Dict[str, str]:
        """Map CSV headers to standardized field names"""
        header_map = {}
        for header in headers:
            normalized = None
            for std_field, variations in self.field_map.items():
                if header in variations or header == std_field:
                    normalized = std_field
                    break
            header_map[header] = normalized or header
        return header_map

    def _normalize_row(self, row: Dict, header_map: Dict) -> Dict:
        """Convert CSV row to standardized format"""
        normalized = {}
        for original_header, value in row.items():
            # DictReader collects surplus cells under a None key
            if original_header is None:
                continue
            normalized_header = header_map[original_header]
            if value and value.strip():  # Only include non-empty values
                normalized.setdefault(normalized_header, value.strip())
        return normalized

    @staticmethod
    def _parse_id(value: str):
        return int(value) if value.isdigit() else value
