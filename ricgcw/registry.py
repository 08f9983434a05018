"""The collections served over HTTP, each with its service."""

from __future__ import annotations

from .crud.models import Attendance, BibleStudy, Event, Target, Transaction
from .crud.services import CollectionService
from .members.services import MemberService
from .resources.services import ResourceService


def collection_services() -> list[CollectionService]:
    """Return one service per collection exposed by the API."""
    return [
        MemberService(),
        CollectionService(Event),
        CollectionService(Attendance),
        CollectionService(Transaction),
        ResourceService(),
        CollectionService(BibleStudy),
        CollectionService(Target),
    ]
