"""
Ledger of instances saved by a factory engine.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from .errors import AggregateDeleteError, DeleteMethodNotFoundError

logger = logging.getLogger(__name__)


class SavedSetTracker:
    """Records saved instances in creation order.

    Membership is by identity, so two equal instances are tracked separately.
    """

    def __init__(self) -> None:
        self._saved: list[Any] = []

    def record(self, obj: Any) -> None:
        self._saved.append(obj)

    def all(self) -> list[Any]:
        """Return saved instances in creation order."""
        return list(self._saved)

    def contains(self, obj: Any) -> bool:
        return any(saved is obj for saved in self._saved)

    def clear(self) -> None:
        self._saved.clear()

    def __len__(self) -> int:
        return len(self._saved)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._saved))

    def delete_all(self, method: str) -> None:
        """
        Call ``method`` on every saved instance, then empty the ledger.

        Instances are deleted newest first, so objects go before the
        associations they were created with. A failure on one instance
        does not stop the others.

        Args:
            method: Name of the zero-argument delete method

        Raises:
            AggregateDeleteError: If any instance lacked the method or raised
        """
        errors: list[Exception] = []

        for obj in reversed(self._saved):
            try:
                delete = getattr(obj, method, None)
                if delete is None or not callable(delete):
                    raise DeleteMethodNotFoundError(obj, method)
                delete()
                logger.debug("Deleted %s", type(obj).__name__)
            except Exception as e:
                logger.warning("Failed to delete %s: %s", type(obj).__name__, e)
                errors.append(e)

        self._saved.clear()

        if errors:
            raise AggregateDeleteError(errors)
