from dataclasses import dataclass, fields as dataclass_fields
from typing import Dict

# Attribute name -> key used in the JSON output and cache files.
JSON_KEYS = {
    "telephone_number": "telephoneNumber",
    "street": "street",
    "city": "city",
    "full_name": "fullName",
}


@dataclass(frozen=True)
class Entry:
    telephone_number: str
    street: str
    city: str
    full_name: str

    def to_dict(self) -> Dict[str, str]:
        """Converts the entry to the dictionary layout of the results file."""
        return {JSON_KEYS[f.name]: getattr(self, f.name) for f in dataclass_fields(self)}

    @classmethod
    def from_dict(cls, data: Dict) -> "Entry":
        """Builds an entry from a results/cache file object. Missing keys become empty strings."""
        return cls(**{name: str(data.get(key) or "") for name, key in JSON_KEYS.items()})
