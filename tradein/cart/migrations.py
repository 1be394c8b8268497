"""
Trade-In Client — Stored Cart Migrations

When the stored version marker differs from the current CART_VERSION, the
migrator looks up a step registered for the stored version. Without one the
stored cart is discarded (one-way forward reset). Today no steps are
registered, so every mismatch is a reset.
"""

from __future__ import annotations

from typing import Any, Callable

import structlog

logger = structlog.get_logger(__name__)

MigrationStep = Callable[[list[dict[str, Any]]], list[dict[str, Any]]]


class CartMigrator:
    """
    Registry of version → current-version upgrade steps.

    Usage:
        migrator = CartMigrator()

        @migrator.register("1")
        def from_v1(items):
            return [{**item, "pricePerItem": item.pop("price")} for item in items]
    """

    def __init__(self) -> None:
        self._steps: dict[str, MigrationStep] = {}

    def register(self, from_version: str | int) -> Callable[[MigrationStep], MigrationStep]:
        def decorator(step: MigrationStep) -> MigrationStep:
            self._steps[str(from_version)] = step
            return step

        return decorator

    def migrate(
        self,
        stored_version: str | None,
        items: list[dict[str, Any]] | None,
    ) -> list[dict[str, Any]]:
        """
        Upgrade stored items to the current shape.

        Returns:
            The migrated items, or an empty list when the stored cart must be
            discarded.
        """
        step = self._steps.get(str(stored_version)) if stored_version is not None else None
        if step is None or items is None:
            logger.info(
                "cart_version_mismatch_reset",
                stored_version=stored_version,
                discarded_items=len(items or []),
            )
            return []

        migrated = step(items)
        logger.info(
            "cart_migrated",
            stored_version=stored_version,
            items=len(migrated),
        )
        return migrated
