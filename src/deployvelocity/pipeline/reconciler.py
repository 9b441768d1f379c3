"""Diff fetched fingerprints against the store and persist changes."""

from collections.abc import Iterable

from ..scraper.types import FetchResult
from ..storage.interface import VersionStore
from ..storage.types import LookupStatus, StorageError, StoredRecord
from ..utils.logging import get_structured_logger
from .types import ReconcileAction, ReconcileOutcome

logger = get_structured_logger(__name__)


class Reconciler:
    """Compares each successful result with the latest stored version.

    Hosts are handled one at a time in input order. A new record is written
    only when the fingerprint differs from the stored one, or when there is no
    usable stored record; its counter is the previous counter plus one.
    Store failures are confined to the host they occurred for.
    """

    async def reconcile(
        self, results: Iterable[FetchResult], store: VersionStore
    ) -> list[ReconcileOutcome]:
        outcomes = []
        for result in results:
            outcomes.append(await self._reconcile_one(result, store))

        logger.info(
            "Reconciliation complete",
            hosts=len(outcomes),
            changed=sum(1 for o in outcomes if o.changed),
            errors=sum(
                1
                for o in outcomes
                if o.action
                in (ReconcileAction.READ_FAILED, ReconcileAction.WRITE_FAILED)
            ),
        )
        return outcomes

    async def _reconcile_one(
        self, result: FetchResult, store: VersionStore
    ) -> ReconcileOutcome:
        if not result.success:
            return ReconcileOutcome(
                host=result.host,
                url=result.url,
                action=ReconcileAction.FETCH_FAILED,
                error=result.error_message,
            )

        try:
            lookup = await store.get_latest(result.host)
        except StorageError as e:
            logger.error("Store read failed", host=result.host, error=str(e))
            return ReconcileOutcome(
                host=result.host,
                url=result.url,
                action=ReconcileAction.READ_FAILED,
                version_fingerprint=result.version_fingerprint,
                error=str(e),
            )

        if (
            lookup.status is LookupStatus.FOUND
            and lookup.version_fingerprint == result.version_fingerprint
        ):
            logger.debug("Version unchanged", host=result.host)
            return ReconcileOutcome(
                host=result.host,
                url=result.url,
                action=ReconcileAction.UNCHANGED,
                version_fingerprint=result.version_fingerprint,
                previous_fingerprint=lookup.version_fingerprint,
                update_count=lookup.update_count,
            )

        if lookup.status is LookupStatus.FOUND:
            action = ReconcileAction.UPDATED
            update_count = lookup.update_count + 1
        else:
            if lookup.status is LookupStatus.MALFORMED:
                logger.warning(
                    "Stored record unusable, starting count over", host=result.host
                )
            action = ReconcileAction.CREATED
            update_count = 1

        record = StoredRecord(
            host=result.host,
            url=result.url,
            version_fingerprint=result.version_fingerprint,
            header_fingerprint=result.header_fingerprint,
            includes_fingerprint=result.includes_fingerprint,
            includes_list=result.includes_list,
            update_count=update_count,
            updated_at=result.observed_at,
        )

        try:
            await store.put(record)
        except StorageError as e:
            logger.error("Store write failed", host=result.host, error=str(e))
            return ReconcileOutcome(
                host=result.host,
                url=result.url,
                action=ReconcileAction.WRITE_FAILED,
                version_fingerprint=result.version_fingerprint,
                previous_fingerprint=lookup.version_fingerprint,
                update_count=update_count,
                error=str(e),
            )

        logger.info(
            "Version changed",
            host=result.host,
            update_count=update_count,
            version_fingerprint=result.version_fingerprint,
        )
        return ReconcileOutcome(
            host=result.host,
            url=result.url,
            action=action,
            version_fingerprint=result.version_fingerprint,
            previous_fingerprint=lookup.version_fingerprint,
            update_count=update_count,
        )
