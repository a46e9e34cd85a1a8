from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from dataclasses_json import dataclass_json


@dataclass_json
@dataclass
class Address:
    street: str
    city: str


@dataclass_json
@dataclass
class Person:
    name: str
    address: Address
    tags: set[str]
    role: Literal["admin", "user"]
