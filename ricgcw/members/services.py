"""Service layer for members and their contributions."""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING, Any, Optional

from firebase_admin import firestore
from flask import current_app
from google.api_core.exceptions import AlreadyExists

from ricgcw.constants import (
    CONTRIBUTIONS_COLLECTION,
    FIELD_CREATED_AT,
    FIELD_NAME,
    MEMBER_NAMES_COLLECTION,
    MEMBERS_COLLECTION,
)
from ricgcw.crud.models import (
    Contribution,
    ContributionDocument,
    Member,
    MemberDocument,
)
from ricgcw.crud.services import CollectionService
from ricgcw.errors import DuplicateResourceError, NotFoundError
from ricgcw.utils import utcnow_iso

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.document import DocumentReference
    from google.cloud.firestore_v1.transaction import Transaction


def normalize_name(name: str) -> str:
    """Return the form of a member name used for uniqueness checks."""
    return name.strip().casefold()


def duplicate_name_message(name: str) -> str:
    return f"A member named '{name.strip()}' already exists."


class MemberService(CollectionService):
    """The members collection, with member names unique case-insensitively.

    Each member name is claimed in the ``member-names`` index collection with
    a conditional create once the member document carries it, so two
    concurrent registrations of the same name cannot both succeed.
    """

    def __init__(self) -> None:
        """Bind the service to the member record type."""
        super().__init__(Member)

    @staticmethod
    def _index_ref(db: Client, name: str) -> DocumentReference:
        digest = hashlib.sha1(  # nosec B324
            normalize_name(name).encode("utf-8")
        ).hexdigest()
        return db.collection(MEMBER_NAMES_COLLECTION).document(digest)

    @staticmethod
    def find_by_name(db: Client, name: str) -> list[str]:
        """Return ids of members whose stored name equals the trimmed name."""
        query = db.collection(MEMBERS_COLLECTION).where(
            filter=firestore.FieldFilter(FIELD_NAME, "==", name.strip())
        )
        return [doc.id for doc in query.stream()]

    def check_legacy_names(self, db: Client, name: str, member_id: str) -> None:
        """Reject a name stored exactly on another member.

        Members saved before the name index existed have no claim, so they are
        only found this way.

        Raises:
            DuplicateResourceError: If another member has exactly this name.
        """
        for existing_id in self.find_by_name(db, name):
            if existing_id != member_id:
                raise DuplicateResourceError(duplicate_name_message(name))

    @staticmethod
    def holds_name(
        db: Client,
        member_id: Optional[str],
        name: str,
        transaction: Optional[Transaction] = None,
    ) -> bool:
        """Whether a member document exists and still carries the name."""
        if not member_id:
            return False
        snapshot = (
            db.collection(MEMBERS_COLLECTION)
            .document(member_id)
            .get(transaction=transaction)
        )
        if not snapshot.exists:
            return False
        stored = (snapshot.to_dict() or {}).get(FIELD_NAME) or ""
        return normalize_name(stored) == normalize_name(name)

    def claim_name(self, db: Client, name: str, member_id: str) -> None:
        """Reserve a name for a member whose document already carries it.

        A claim whose owner is gone, or no longer has the name, is stale and
        is taken over.

        Raises:
            DuplicateResourceError: If another member holds the name.
        """
        index_ref = self._index_ref(db, name)
        claim = {
            "name": name.strip(),
            "memberId": member_id,
            FIELD_CREATED_AT: utcnow_iso(),
        }
        try:
            index_ref.create(claim)
            return
        except AlreadyExists:
            pass

        owner = (index_ref.get().to_dict() or {}).get("memberId")
        if owner == member_id:
            return
        if self.holds_name(db, owner, name):
            raise DuplicateResourceError(duplicate_name_message(name))

        take_over = firestore.transactional(self._take_over_claim)
        if not take_over(db.transaction(), db, index_ref, owner, claim):
            raise DuplicateResourceError(duplicate_name_message(name))
        current_app.logger.warning(
            f"Took over stale claim on member name '{name.strip()}' from {owner}"
        )

    @staticmethod
    def _take_over_claim(
        transaction: Transaction,
        db: Client,
        index_ref: DocumentReference,
        stale_owner: Optional[str],
        claim: dict[str, Any],
    ) -> bool:
        snapshot = index_ref.get(transaction=transaction)
        owner = (snapshot.to_dict() or {}).get("memberId") if snapshot.exists else None
        if owner != stale_owner:
            return False
        if MemberService.holds_name(db, owner, claim["name"], transaction):
            return False
        transaction.set(index_ref, claim)
        return True

    def release_name(self, db: Client, name: str, member_id: str) -> None:
        """Free a name, but only if this member is the one holding it."""
        index_ref = self._index_ref(db, name)
        snapshot = index_ref.get()
        if snapshot.exists and (snapshot.to_dict() or {}).get("memberId") == member_id:
            index_ref.delete()

    def _release_after_write(self, db: Client, name: str, member_id: str) -> None:
        # The member write is committed; a claim left behind is stale and gets
        # taken over by the next member to use the name.
        try:
            self.release_name(db, name, member_id)
        except Exception as e:
            current_app.logger.warning(
                f"Could not release member name '{name}' held by {member_id}: {e}"
            )

    def create(self, db: Client, data: Any) -> MemberDocument:
        """Register a member, rejecting names that are already taken.

        The member document is written before its name is claimed and is
        removed again if the claim fails.
        """
        record = self.prepare(data)
        name = record.get(FIELD_NAME) or ""
        doc_ref = db.collection(MEMBERS_COLLECTION).document()

        if name:
            self.check_legacy_names(db, name, doc_ref.id)
        doc_ref.set(record)
        if name:
            try:
                self.claim_name(db, name, doc_ref.id)
            except Exception:
                doc_ref.delete()
                raise

        current_app.logger.info(f"POST /{MEMBERS_COLLECTION} - Created ID: {doc_ref.id}")
        return {"id": doc_ref.id, **record}

    def update(self, db: Client, doc_id: str, data: Any) -> dict[str, Any]:
        """Merge changes into a member, moving the name claim on rename.

        A rename is written first and rolled back if the new name cannot be
        claimed.
        """
        changes = self.record_type.validate(data, partial=True)
        current = self.get(db, doc_id)
        if current is None:
            raise NotFoundError(f"No member with id '{doc_id}' in {MEMBERS_COLLECTION}.")

        old_name = current.get(FIELD_NAME) or ""
        new_name = changes.get(FIELD_NAME) or ""
        renamed = bool(new_name) and normalize_name(new_name) != normalize_name(
            old_name
        )

        if renamed:
            self.check_legacy_names(db, new_name, doc_id)
        self._merge(db, doc_id, changes)
        if renamed:
            try:
                self.claim_name(db, new_name, doc_id)
            except Exception:
                self._merge(db, doc_id, {key: current.get(key) for key in changes})
                raise
            if old_name:
                self._release_after_write(db, old_name, doc_id)

        return {"id": doc_id, **changes}

    def delete(self, db: Client, doc_id: str) -> None:
        """Delete a member and free its name."""
        current = self.get(db, doc_id)
        super().delete(db, doc_id)
        if current and current.get(FIELD_NAME):
            self._release_after_write(db, current[FIELD_NAME], doc_id)


class ContributionService:
    """Contributions stored under ``members/<id>/contributions``."""

    @staticmethod
    def _collection(db: Client, member_id: str) -> Any:
        return (
            db.collection(MEMBERS_COLLECTION)
            .document(member_id)
            .collection(CONTRIBUTIONS_COLLECTION)
        )

    @staticmethod
    def list_for_member(db: Client, member_id: str) -> list[ContributionDocument]:
        """Return a member's contributions, each with its id."""
        return [
            {"id": doc.id, **(doc.to_dict() or {})}
            for doc in ContributionService._collection(db, member_id).stream()
        ]

    @staticmethod
    def add(db: Client, member_id: str, data: Any) -> ContributionDocument:
        """Record a contribution for an existing member.

        Raises:
            NotFoundError: If the member does not exist.
        """
        record = Contribution.validate(data)
        member_doc = db.collection(MEMBERS_COLLECTION).document(member_id).get()
        if not member_doc.exists:
            raise NotFoundError(f"No member with id '{member_id}'.")

        member = member_doc.to_dict() or {}
        record["memberId"] = member_id
        if not record.get("memberName") and member.get(FIELD_NAME):
            record["memberName"] = member[FIELD_NAME]
        if not record.get(FIELD_CREATED_AT):
            record[FIELD_CREATED_AT] = utcnow_iso()

        doc_ref = ContributionService._collection(db, member_id).document()
        doc_ref.set(record)
        current_app.logger.info(
            f"POST /{MEMBERS_COLLECTION}/{member_id}/{CONTRIBUTIONS_COLLECTION}"
            f" - Created ID: {doc_ref.id}"
        )
        return {"id": doc_ref.id, **record}
