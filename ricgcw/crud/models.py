"""Record types for the church collections.

Each collection stored in Firestore has a record class describing the fields
the application understands. Records are validated at the API boundary: known
fields must have the declared kind (and, for enumerations, one of the allowed
values), required fields must be present on create, and anything else the SPA
sends is kept as-is.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Optional, TypedDict, Union

from flask import current_app

from ricgcw.constants import (
    ATTENDANCE_COLLECTION,
    BIBLE_STUDIES_COLLECTION,
    CONTRIBUTION_TYPES,
    CONTRIBUTIONS_COLLECTION,
    EVENTS_COLLECTION,
    FIELD_ID,
    MEMBER_STATUSES,
    MEMBERS_COLLECTION,
    RESOURCE_TYPES,
    RESOURCES_COLLECTION,
    TARGETS_COLLECTION,
    TRANSACTION_TYPES,
    TRANSACTIONS_COLLECTION,
)
from ricgcw.core.types import FirestoreDocument
from ricgcw.errors import ValidationError
from ricgcw.utils import parse_iso_datetime

STRING = "string"
NUMBER = "number"
BOOLEAN = "boolean"
DATE = "date"
LIST = "list"
OBJECT = "object"

Choices = Union[tuple[str, ...], Callable[[], tuple[str, ...]]]


def configured_branches() -> tuple[str, ...]:
    """Return the branch names configured for the running app."""
    return tuple(current_app.config.get("CHURCH_BRANCHES") or ())


@dataclass(frozen=True)
class Field:
    """Declaration of a known record field."""

    kind: str = STRING
    required: bool = False
    choices: Optional[Choices] = None
    strip: bool = False

    def allowed(self) -> tuple[str, ...]:
        """Return the allowed values for an enumerated field."""
        if self.choices is None:
            return ()
        if callable(self.choices):
            return self.choices()
        return self.choices

    def clean(self, name: str, value: Any) -> Any:
        """Validate a single value and return its stored form."""
        if value is None:
            if self.required:
                raise ValidationError(f"Field '{name}' is required.")
            return None

        if self.kind == STRING:
            if not isinstance(value, str):
                raise ValidationError(f"Field '{name}' must be a string.")
            if self.strip:
                value = value.strip()
            if self.required and not value.strip():
                raise ValidationError(f"Field '{name}' is required.")
            if self.choices is not None and value:
                value = self._match_choice(name, value)
            return value

        if self.kind == NUMBER:
            return self._clean_number(name, value)

        if self.kind == BOOLEAN:
            if not isinstance(value, bool):
                raise ValidationError(f"Field '{name}' must be true or false.")
            return value

        if self.kind == DATE:
            if value == "" and not self.required:
                return value
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"Field '{name}' must be an ISO-8601 date.")
            try:
                parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(
                    f"Field '{name}' must be an ISO-8601 date."
                ) from None
            return value

        if self.kind == LIST:
            if not isinstance(value, list):
                raise ValidationError(f"Field '{name}' must be a list.")
            return value

        if self.kind == OBJECT:
            if not isinstance(value, dict):
                raise ValidationError(f"Field '{name}' must be an object.")
            return value

        raise ValueError(f"Unknown field kind: {self.kind}")

    def _match_choice(self, name: str, value: str) -> str:
        allowed = self.allowed()
        wanted = value.strip().casefold()
        for choice in allowed:
            if choice.casefold() == wanted:
                return choice
        raise ValidationError(
            f"Field '{name}' must be one of: {', '.join(allowed)}."
        )

    @staticmethod
    def _clean_number(name: str, value: Any) -> Union[int, float]:
        # bool is an int subclass, and never a meaningful amount.
        if isinstance(value, bool):
            raise ValidationError(f"Field '{name}' must be a number.")
        if isinstance(value, (int, float)):
            if not math.isfinite(value):
                raise ValidationError(f"Field '{name}' must be a number.")
            return value
        if isinstance(value, str):
            text = value.strip()
            try:
                number = float(text)
            except ValueError:
                raise ValidationError(f"Field '{name}' must be a number.") from None
            if not math.isfinite(number):
                raise ValidationError(f"Field '{name}' must be a number.")
            return int(number) if number.is_integer() and "." not in text else number
        raise ValidationError(f"Field '{name}' must be a number.")


class Record:
    """Base class for a collection's record type."""

    collection: ClassVar[str]
    label: ClassVar[str] = "record"
    fields: ClassVar[dict[str, Field]] = {}

    @classmethod
    def validate(cls, data: Any, partial: bool = False) -> dict[str, Any]:
        """Validate a request body and return the document to store.

        Args:
            data: The decoded JSON body.
            partial: True for merge updates, where required fields may be
                omitted but must not be blanked out.

        Raises:
            ValidationError: If the body is not an object or a field is invalid.
        """
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object.")
        if not data:
            raise ValidationError("Request body cannot be empty")

        cleaned = {key: value for key, value in data.items() if key != FIELD_ID}
        if partial and not cleaned:
            raise ValidationError("Request body cannot be empty")

        for name, field in cls.fields.items():
            if name in cleaned:
                value = field.clean(name, cleaned[name])
                if value is None and not partial:
                    del cleaned[name]
                else:
                    cleaned[name] = value
            elif field.required and not partial:
                raise ValidationError(f"Field '{name}' is required.")
        return cleaned


BRANCH = Field(STRING, choices=configured_branches)


class MemberDocument(FirestoreDocument, total=False):
    """A member document in Firestore."""

    name: str
    email: str
    phone: str
    address: str
    dob: str
    department: str
    position: str
    membershipType: str
    status: str


class Member(Record):
    collection = MEMBERS_COLLECTION
    label = "member"
    fields = {
        "name": Field(STRING, required=True, strip=True),
        "email": Field(STRING),
        "phone": Field(STRING),
        "address": Field(STRING),
        "dob": Field(DATE),
        "branch": BRANCH,
        "department": Field(STRING),
        "position": Field(STRING),
        "membershipType": Field(STRING),
        "status": Field(STRING, choices=MEMBER_STATUSES),
        "createdAt": Field(STRING),
    }


class Event(Record):
    collection = EVENTS_COLLECTION
    label = "event"
    fields = {
        "name": Field(STRING, required=True, strip=True),
        "date": Field(DATE, required=True),
        "time": Field(STRING),
        "location": Field(STRING),
        "isOnline": Field(BOOLEAN),
        "description": Field(STRING),
        "branch": BRANCH,
        "createdAt": Field(STRING),
    }


class Attendance(Record):
    collection = ATTENDANCE_COLLECTION
    label = "attendance record"
    fields = {
        "date": Field(DATE, required=True),
        "attendees": Field(LIST, required=True),
        "branch": BRANCH,
        "createdAt": Field(STRING),
    }

    @classmethod
    def validate(cls, data: Any, partial: bool = False) -> dict[str, Any]:
        cleaned = super().validate(data, partial)
        for attendee in cleaned.get("attendees") or []:
            if not isinstance(attendee, dict):
                raise ValidationError("Each attendee must be an object.")
        return cleaned


class Transaction(Record):
    collection = TRANSACTIONS_COLLECTION
    label = "transaction"
    fields = {
        "amount": Field(NUMBER, required=True),
        "description": Field(STRING),
        "type": Field(STRING, required=True, choices=TRANSACTION_TYPES),
        "category": Field(STRING),
        "branch": BRANCH,
        "date": Field(DATE),
        "createdAt": Field(STRING),
    }


class Resource(Record):
    collection = RESOURCES_COLLECTION
    label = "resource"
    fields = {
        "title": Field(STRING, required=True, strip=True),
        "type": Field(STRING, choices=RESOURCE_TYPES),
        "url": Field(STRING),
        "link": Field(STRING),
        "storagePath": Field(STRING),
        "fileName": Field(STRING),
        "size": Field(NUMBER),
        "createdAt": Field(STRING),
    }


class BibleStudy(Record):
    collection = BIBLE_STUDIES_COLLECTION
    label = "bible study"
    fields = {
        "title": Field(STRING, required=True, strip=True),
        "passage": Field(STRING),
        "date": Field(DATE),
        "leader": Field(STRING),
        "description": Field(STRING),
        "notes": Field(STRING),
        "branch": BRANCH,
        "createdAt": Field(STRING),
    }


class Target(Record):
    collection = TARGETS_COLLECTION
    label = "target"
    fields = {
        "name": Field(STRING, required=True, strip=True),
        "amount": Field(NUMBER),
        "category": Field(STRING),
        "period": Field(STRING),
        "branch": BRANCH,
        "createdAt": Field(STRING),
    }


class ContributionDocument(FirestoreDocument, total=False):
    """A contribution in a member's sub-collection."""

    amount: float
    type: str
    description: str
    date: str
    memberId: str
    memberName: str


class Contribution(Record):
    collection = CONTRIBUTIONS_COLLECTION
    label = "contribution"
    fields = {
        "amount": Field(NUMBER, required=True),
        "type": Field(STRING, choices=CONTRIBUTION_TYPES),
        "description": Field(STRING),
        "date": Field(DATE),
        "memberName": Field(STRING),
        "createdAt": Field(STRING),
    }

    @classmethod
    def validate(cls, data: Any, partial: bool = False) -> dict[str, Any]:
        cleaned = super().validate(data, partial)
        if not partial and not cleaned.get("type"):
            cleaned["type"] = CONTRIBUTION_TYPES[0]
        return cleaned
