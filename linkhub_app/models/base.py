from datetime import datetime, timezone
from typing import Any, Dict, Optional
import json
import secrets
import time

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    """Current time as epoch milliseconds (the store's timestamp unit)"""
    return int(time.time() * 1000)


def ms_to_date(timestamp_ms: float) -> str:
    """UTC calendar date (YYYY-MM-DD) for an epoch-milliseconds timestamp"""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).date().isoformat()


class StoreRecord(BaseModel):
    """
    Base for records persisted as store hashes.

    Fields are snake_case in Python and camelCase in the store (and in
    API payloads), so records stay compatible with existing data.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def restore_plain_strings(cls, data: Any) -> Any:
        """
        Hash values are JSON decoded on read, so a plain string written
        by another client ("12345", "true", "null") comes back as a
        number, bool or None. Text fields get their original text back.
        """
        if not isinstance(data, dict):
            return data
        restored = dict(data)
        for name, field in cls.model_fields.items():
            if field.annotation not in (str, Optional[str]):
                continue
            for key in {name, field.alias or name}:
                if key not in restored:
                    continue
                value = restored[key]
                if isinstance(value, (bool, int, float)) or (value is None and field.annotation is str):
                    restored[key] = json.dumps(value)
        return restored

    def to_store(self) -> Dict[str, Any]:
        """Hash fields to write, None values are left out"""
        return self.model_dump(by_alias=True, exclude_none=True)


def generate_id(prefix: str) -> str:
    """
    Record id of the form <prefix>_<epoch ms>_<random>.

    The random suffix keeps ids unique when several records are created
    within the same millisecond.
    """
    return f"{prefix}_{now_ms()}_{secrets.token_hex(3)}"
