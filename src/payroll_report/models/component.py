"""Component registry models: the authoritative field name to bucket mapping."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from enum import StrEnum
from types import MappingProxyType

from pydantic import BaseModel

from payroll_report.core.exceptions import RegistryError


class Bucket(StrEnum):
    SALARY = "SALARY"
    ALLOWANCE = "ALLOWANCE"
    DEDUCTION = "DEDUCTION"
    NEUTRAL = "NEUTRAL"


class ComponentEntry(BaseModel):
    """One row of the master component registry."""

    code: str
    name: str
    type: Bucket
    active: bool = True
    notes: str = ""

    model_config = {"str_strip_whitespace": True, "frozen": True}


class RegistrySnapshot(Mapping[str, Bucket]):
    """Read-only name -> bucket view over the active registry entries.

    Loaded once per ingestion run and passed explicitly to the classifier so a
    run never observes registry edits made while it is in flight.
    """

    def __init__(self, entries: Iterable[ComponentEntry] = ()) -> None:
        types: dict[str, Bucket] = {}
        codes: dict[str, str] = {}
        for entry in entries:
            if not entry.active:
                continue
            if entry.name in types:
                raise RegistryError(
                    f"Component name {entry.name!r} is registered twice "
                    f"({codes[entry.name]!r}, {entry.code!r})"
                )
            types[entry.name] = entry.type
            codes[entry.name] = entry.code
        self._types = MappingProxyType(types)
        self._codes = MappingProxyType(codes)

    def __getitem__(self, name: str) -> Bucket:
        return self._types[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def code_for(self, name: str) -> str | None:
        return self._codes.get(name)
