"""Bulk partial update of an exhibit's saved searches.

Curators edit many saved searches at once (reordering, toggling the landing
page flag, retitling). The submitted batch names only the records it
changes; everything it does not mention stays exactly as stored. A batch is
all-or-nothing: it is validated and resolved in full before any record is
touched, and it is committed as one transaction.
"""

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from vitrine.core.exceptions import (
    ConflictError,
    FieldError,
    SavedSearchNotFoundError,
    ValidationFailedError,
    field_errors_from_pydantic,
)
from vitrine.core.logging import get_logger
from vitrine.db.models.search import SavedSearch
from vitrine.db.repositories.search import SavedSearchRepository
from vitrine.db.schemas.search import SavedSearchPatch

logger = get_logger(__name__)


class ReconciliationEngine:
    """Apply per-id partial updates to one exhibit's saved searches.

    Example:
        >>> engine = ReconciliationEngine(db, exhibit.exhibit_id)
        >>> await engine.reconcile({12: {"weight": 0}, 14: {"on_landing_page": True}})
        [12, 14]
    """

    def __init__(self, db: AsyncSession, exhibit_id: UUID):
        self.db = db
        self.exhibit_id = exhibit_id
        self.repo = SavedSearchRepository(db)

    async def reconcile(self, updates: Mapping[int | str, Mapping[str, Any]]) -> list[int]:
        """Validate, resolve and apply a batch of partial updates.

        Args:
            updates: Saved search id -> fields to change. Ids may be given as
                strings, as they arrive from JSON object keys.

        Returns:
            Sorted ids of the records named in the batch

        Raises:
            ValidationFailedError: If any patch is invalid; errors are keyed
                "<id>.<field>"
            SavedSearchNotFoundError: If any id is not a search of this exhibit
            ConflictError: If a supplied lock_version is stale or a concurrent
                writer got there first
        """
        patches = self._validate(updates)
        searches = await self._resolve(patches.keys())
        self._check_versions(patches, searches)

        try:
            for search_id, patch in patches.items():
                self._apply(searches[search_id], patch)
            await self.db.flush()
            await self.db.commit()
        except StaleDataError as exc:
            await self.db.rollback()
            logger.warning(
                "reconcile_conflict",
                exhibit_id=str(self.exhibit_id),
                error=str(exc),
            )
            raise ConflictError() from exc
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        updated = sorted(patches)
        logger.info(
            "saved_searches_reconciled",
            exhibit_id=str(self.exhibit_id),
            updated=updated,
            count=len(updated),
        )
        return updated

    def _validate(self, updates: Mapping[int | str, Mapping[str, Any]]) -> dict[int, SavedSearchPatch]:
        patches: dict[int, SavedSearchPatch] = {}
        errors: list[FieldError] = []
        seen: set[int] = set()

        for raw_id, fields in updates.items():
            try:
                search_id = int(raw_id)
            except (TypeError, ValueError):
                errors.append(FieldError(field=str(raw_id), message="is not a saved search id"))
                continue

            # "7" and "07" name the same record
            if search_id in seen:
                errors.append(FieldError(field=str(raw_id), message=f"Duplicate id {search_id}"))
                continue
            seen.add(search_id)

            if not isinstance(fields, Mapping):
                errors.append(FieldError(field=str(search_id), message="must be an object of fields"))
                continue

            try:
                patches[search_id] = SavedSearchPatch.model_validate(dict(fields))
            except ValidationError as exc:
                errors.extend(field_errors_from_pydantic(exc, prefix=str(search_id)))

        if errors:
            logger.info(
                "reconcile_rejected",
                exhibit_id=str(self.exhibit_id),
                error_count=len(errors),
            )
            raise ValidationFailedError(errors)
        return patches

    async def _resolve(self, search_ids) -> dict[int, SavedSearch]:
        wanted = list(search_ids)
        found = await self.repo.get_many_for_exhibit(self.exhibit_id, wanted)
        missing = [i for i in wanted if i not in found]
        if missing:
            raise SavedSearchNotFoundError(missing, self.exhibit_id)
        return found

    @staticmethod
    def _check_versions(
        patches: Mapping[int, SavedSearchPatch], searches: Mapping[int, SavedSearch]
    ) -> None:
        for search_id, patch in patches.items():
            expected = patch.lock_version
            actual = searches[search_id].lock_version
            if expected is not None and expected != actual:
                raise ConflictError(search_id, expected_version=expected, actual_version=actual)

    @staticmethod
    def _apply(search: SavedSearch, patch: SavedSearchPatch) -> None:
        for name, value in patch.changes().items():
            setattr(search, name, value)
