"""Selector identity derivation and registration."""

import hashlib
import logging
from typing import Optional

from ..core.exceptions import DuplicateIdentityError
from ..core.models import Locator, Selector
from ..data_access import Database, SelectorRepository

logger = logging.getLogger(__name__)


class SelectorService:
    """Derives stable selector ids and registers selectors reported by clients."""

    def __init__(self, database: Database):
        self.database = database

    def get_selector_id(self, locator: Locator, url: Optional[str], command: str, url_for_key: bool) -> str:
        """Derive the selector identifier.

        Args:
            locator: Locator descriptor of the original element lookup
            url: Page URL the lookup ran against
            command: Automation command that issued the lookup
            url_for_key: Whether the page URL is part of the identity

        Returns:
            str: SHA-256 hex digest, stable across processes
        """
        parts = [command or "", locator.type, locator.value]
        if url_for_key:
            parts.append(url or "")
        return hashlib.sha256("\x1f".join(parts).encode("utf-8")).hexdigest()

    def register_selector(
        self,
        class_name: str,
        method_name: str,
        locator: Locator,
        command: str,
        url: Optional[str],
        url_for_key: bool
    ) -> Selector:
        """Register a selector, returning the existing one when already known."""
        selector = Selector(
            uid=self.get_selector_id(locator, url, command, url_for_key),
            class_name=class_name,
            method_name=method_name,
            locator=locator,
            command=command,
            url=url
        )
        with self.database.transaction() as conn:
            repository = SelectorRepository(conn)
            existing = repository.find_by_id(selector.uid)
            if existing is not None:
                return existing
            try:
                repository.save(selector)
            except DuplicateIdentityError:
                return repository.find_by_id(selector.uid)
        logger.debug(f"[Save Selector] Registered selector {selector.uid} for {class_name}.{method_name}")
        return selector
