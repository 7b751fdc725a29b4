"""
Explicit state container for the single application being edited.

The store owns the current ``ApplicantRecord``, exposes the mutation API and
publishes a snapshot to every subscriber after each committed mutation.
Readers always get deep copies, so the evaluator and the document mapper
never see a record that is being changed under them.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, List, Mapping, NamedTuple, Optional, Union

from schemas.ai import ParsedCV
from schemas.resume import ApplicantRecord, VisaTier

from . import mutations

logger = logging.getLogger(__name__)

Listener = Callable[[ApplicantRecord, int], None]


class RequestToken(NamedTuple):
    revision: int
    tier: VisaTier


class StaleRecordError(RuntimeError):
    """The record changed after a token was taken; the pending change was not applied."""

    def __init__(self, token: RequestToken, current: RequestToken):
        super().__init__(
            f"Record moved from revision {token.revision} ({token.tier.value}) "
            f"to {current.revision} ({current.tier.value})"
        )
        self.token = token
        self.current = current


class RecordStore:
    def __init__(self, record: Optional[ApplicantRecord] = None):
        self._record = record.model_copy(deep=True) if record else ApplicantRecord()
        self._revision = 0
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def tier(self) -> VisaTier:
        return self._record.tier

    def token(self) -> RequestToken:
        with self._lock:
            return RequestToken(self._revision, self._record.tier)

    def snapshot(self) -> ApplicantRecord:
        with self._lock:
            return self._record.model_copy(deep=True)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(snapshot, revision)``; returns a function that unsubscribes."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def load(self, record: ApplicantRecord) -> ApplicantRecord:
        return self._commit(lambda _: record.model_copy(deep=True))

    def reset(self) -> ApplicantRecord:
        return self._commit(lambda _: ApplicantRecord())

    def set_tier(self, tier: Union[VisaTier, str]) -> ApplicantRecord:
        return self._commit(lambda r: mutations.set_tier(r, tier))

    def update_section(
        self, section: str, partial: Mapping[str, Any], *, token: Optional[RequestToken] = None
    ) -> ApplicantRecord:
        return self._commit(lambda r: mutations.update_section(r, section, partial), token)

    def append_list_entry(self, list_name: str, entry) -> ApplicantRecord:
        return self._commit(lambda r: mutations.append_list_entry(r, list_name, entry))

    def update_list_entry(self, list_name: str, index: int, partial) -> ApplicantRecord:
        return self._commit(lambda r: mutations.update_list_entry(r, list_name, index, partial))

    def remove_list_entry(self, list_name: str, index: int) -> ApplicantRecord:
        return self._commit(lambda r: mutations.remove_list_entry(r, list_name, index))

    def merge_parsed_cv(self, parsed: ParsedCV, *, token: Optional[RequestToken] = None) -> ApplicantRecord:
        return self._commit(lambda r: mutations.merge_parsed_cv(r, parsed), token)

    def _commit(
        self,
        change: Callable[[ApplicantRecord], ApplicantRecord],
        token: Optional[RequestToken] = None,
    ) -> ApplicantRecord:
        # A failing change raises before anything is replaced or published.
        # With a token, the change applies only to the revision it was computed for.
        with self._lock:
            if token is not None:
                current = RequestToken(self._revision, self._record.tier)
                if token != current:
                    raise StaleRecordError(token, current)
            updated = change(self._record)
            self._record = updated
            self._revision += 1
            revision = self._revision
            listeners = list(self._listeners)
            snapshot = updated.model_copy(deep=True)
        for listener in listeners:
            try:
                listener(snapshot.model_copy(deep=True), revision)
            except Exception:
                logger.exception("Record listener failed at revision %s", revision)
        return snapshot
