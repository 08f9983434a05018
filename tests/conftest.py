"""Common utilities for tests."""

from typing import Any, Callable, Optional

from google.api_core.exceptions import AlreadyExists
from mockfirestore import CollectionReference, MockFirestore, Query
from mockfirestore.document import DocumentReference


def patch_mockfirestore() -> None:
    """Apply monkeypatches to mockfirestore for FieldFilter, create and transactions."""

    def collection_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:  # noqa: E501
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(CollectionReference, "_where"):
        CollectionReference._where = CollectionReference.where
        CollectionReference.where = collection_where

    def query_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(Query, "_where"):
        Query._where = Query.where
        Query.where = query_where

    # Firestore's create() is a conditional write that fails if the document
    # exists; mockfirestore has no equivalent.
    if not hasattr(DocumentReference, "create"):

        def doc_ref_create(self: Any, document_data: dict[str, Any]) -> None:
            if self.get().exists:
                raise AlreadyExists(f"Document already exists: {'/'.join(self._path)}")
            self.set(document_data)

        DocumentReference.create = doc_ref_create

    # Reads inside a transaction pass ``transaction=``; mockfirestore has no
    # transactions, so the keyword is accepted and ignored.
    if not hasattr(DocumentReference, "_get"):
        DocumentReference._get = DocumentReference.get

        def doc_ref_get(
            self: Any, field_paths: Any = None, transaction: Any = None
        ) -> Any:
            return self._get()

        DocumentReference.get = doc_ref_get

    if not hasattr(MockFirestore, "transaction"):
        MockFirestore.transaction = lambda self, **kwargs: None


class ImmediateTransaction:
    """Applies transactional writes straight away."""

    def set(self, reference: Any, document_data: Any, merge: bool = False) -> None:
        reference.set(document_data, merge=merge)

    def delete(self, reference: Any) -> None:
        reference.delete()


def run_immediately(func: Callable[..., Any]) -> Callable[..., Any]:
    """Stand-in for ``firestore.transactional`` that runs the body once."""

    def wrapper(transaction: Any, *args: Any, **kwargs: Any) -> Any:
        return func(ImmediateTransaction(), *args, **kwargs)

    return wrapper
