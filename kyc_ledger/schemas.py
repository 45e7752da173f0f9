# kyc_ledger/schemas.py
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional

# ids and keys are addressed as single URL path segments
SEGMENT = r"^[^/]+$"

from kyc_ledger.utils import unique


class Record(BaseModel):
    """Base for every wire record: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class DataEntry(Record):
    key: str = Field(min_length=1, pattern=SEGMENT)
    value: str = ""
    approved: bool = False
    approving_institution: str = ""
    visibility_list: List[str] = Field(default_factory=list)
    visibility_requests: List[str] = Field(default_factory=list)

    @field_validator("visibility_list", "visibility_requests", mode="before")
    @classmethod
    def _null_as_empty(cls, v):
        return [] if v is None else v

    @field_validator("visibility_list", "visibility_requests")
    @classmethod
    def _dedupe(cls, v: List[str]) -> List[str]:
        return unique(v)

    @model_validator(mode="after")
    def _granted_or_requested(self):
        both = set(self.visibility_list) & set(self.visibility_requests)
        if both:
            raise ValueError(f"ids both granted and requested on {self.key!r}: {sorted(both)}")
        return self


def check_unique_keys(entries: List[DataEntry]) -> List[DataEntry]:
    seen = set()
    for entry in entries:
        if entry.key in seen:
            raise ValueError(f"duplicate data key {entry.key!r}")
        seen.add(entry.key)
    return entries


class Person(Record):
    id: str = Field(min_length=1, pattern=SEGMENT)
    password_digest: str = Field(alias="password")
    data: List[DataEntry] = Field(default_factory=list)

    @field_validator("data")
    @classmethod
    def _unique_keys(cls, v: List[DataEntry]) -> List[DataEntry]:
        return check_unique_keys(v)

    def entry(self, key: str) -> Optional[DataEntry]:
        for e in self.data:
            if e.key == key:
                return e
        return None


class PersonOut(Record):
    id: str
    data: List[DataEntry]


class PendingApproval(Record):
    id: str
    data: DataEntry


class SecureDataEntry(Record):
    key: str
    value: Optional[str] = None
    approved: bool
    request_sent: bool


class SecurePerson(Record):
    id: str
    data: List[SecureDataEntry]


# --- request bodies

class RegisterIn(Record):
    id: str = Field(min_length=1, pattern=SEGMENT)
    secret: str
    data: List[DataEntry] = Field(default_factory=list)


class MergeIn(Record):
    secret: str
    data: List[DataEntry]


class ApproveIn(Record):
    institution: str = Field(min_length=1)


class AccessIn(Record):
    requestor: str = Field(min_length=1)


class OkOut(BaseModel):
    ok: bool = True
