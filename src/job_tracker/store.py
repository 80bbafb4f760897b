import os, json
from typing import Iterable, List

from .models import ApplicationRecord

def dump_records(records: Iterable[ApplicationRecord]) -> str:
    return json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False)

def parse_records(text: str) -> List[ApplicationRecord]:
    raw = json.loads(text)
    if not isinstance(raw, list):
        raise ValueError(f"expected a list of applications, got {type(raw).__name__}")
    return [ApplicationRecord.from_dict(item) for item in raw]

class RecordStore:
    """One JSON file holding the whole collection, rewritten on every save."""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> List[ApplicationRecord]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return parse_records(f.read())
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            # json.JSONDecodeError is a ValueError
            print(f"[Store] Error loading applications from {self.path}: {e}")
            return []

    def save(self, records: Iterable[ApplicationRecord]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        tmp_path = self.path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(dump_records(records))
        os.replace(tmp_path, self.path)
