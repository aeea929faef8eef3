"""
Address book use case

Saved delivery addresses and a default pointer, namespaced per identity and
persisted to the local store. The current delivery address lives on the
session state and follows add/remove/set-default.
"""

import logging
from typing import Any, List, Optional

from goagri_client.application.session_state import SessionState
from goagri_client.domain.entities.address_book import AddressBook
from goagri_client.domain.repositories.key_value_store import KeyValueStore
from goagri_client.domain.value_objects.delivery_address import DeliveryAddress
from goagri_client.infrastructure.utilities.constants import StorageKeys
from goagri_client.infrastructure.utilities.exceptions import (
    GoAgriClientError,
    ValidationError,
)


def addresses_key(owner: str) -> str:
    return f"{StorageKeys.ADDRESSES_PREFIX}{owner}"


def default_address_key(owner: str) -> str:
    return f"{StorageKeys.DEFAULT_ADDRESS_PREFIX}{owner}"


class AddressBookUseCase:
    """
    Use case for the address book

    Handles:
    1. Loading the book for the active identity
    2. Adding and removing saved addresses
    3. Choosing the default and the current delivery address
    """

    def __init__(self, store: KeyValueStore):
        self._store = store
        self._logger = logging.getLogger(self.__class__.__name__)

    async def load(self, state: SessionState) -> AddressBook:
        """Reload the book from the active identity's namespace"""
        owner = state.identity.storage_key
        generation = state.generation
        addresses: List[str] = []
        default: Optional[str] = None
        try:
            stored = await self._store.get(addresses_key(owner))
            default = await self._store.get(default_address_key(owner)) or None
            addresses = self._clean_list(stored)
        except GoAgriClientError as e:
            self._logger.warning("Could not load address book for %s: %s", owner, e)

        book = AddressBook(owner=owner, addresses=addresses, default=default)
        if state.is_current(generation):
            state.address_book = book
            state.delivery_address = book.default or ""
        return book

    async def add(self, state: SessionState, text: str) -> str:
        """
        Save an address and make it the current delivery address.

        Re-adding a saved address stores nothing. The first address ever
        added becomes the default.
        """
        address = self._validate(text)
        book = state.address_book
        is_first = not book.addresses

        if book.add(address):
            await self._save_addresses(state, book)
        if is_first:
            book.set_default(address)
            await self._save_default(state, book)

        state.delivery_address = address
        self._logger.info("📍 Address added for %s (default: %s)", state.identity, is_first)
        return address

    async def remove(self, state: SessionState, text: str) -> bool:
        """Remove a saved address; a removed default is cleared, not replaced"""
        address = (text or "").strip()
        book = state.address_book
        was_default = book.default == address
        if not book.remove(address):
            return False

        await self._save_addresses(state, book)
        if was_default:
            await self._save_default(state, book)
        if state.delivery_address == address:
            state.delivery_address = book.first

        self._logger.info("📍 Address removed for %s", state.identity)
        return True

    async def set_default(self, state: SessionState, text: str) -> str:
        address = self._validate(text)
        book = state.address_book
        book.set_default(address)
        await self._save_default(state, book)
        state.delivery_address = address
        return address

    def select(self, state: SessionState, text: str) -> str:
        """Choose the current delivery address for checkout; not persisted"""
        state.delivery_address = (text or "").strip()
        return state.delivery_address

    def _validate(self, text: str) -> str:
        try:
            return DeliveryAddress(text).value
        except ValueError as e:
            raise ValidationError(str(e), "address") from e

    @staticmethod
    def _clean_list(stored: Any) -> List[str]:
        if not isinstance(stored, list):
            return []
        cleaned: List[str] = []
        for item in stored:
            if isinstance(item, str) and item.strip() and item.strip() not in cleaned:
                cleaned.append(item.strip())
        return cleaned

    async def _save_addresses(self, state: SessionState, book: AddressBook) -> None:
        owner = state.identity.storage_key
        try:
            await self._store.set(addresses_key(owner), list(book.addresses))
        except GoAgriClientError as e:
            self._logger.error("💥 Could not save addresses for %s: %s", owner, e)

    async def _save_default(self, state: SessionState, book: AddressBook) -> None:
        owner = state.identity.storage_key
        try:
            if book.default:
                await self._store.set(default_address_key(owner), book.default)
            else:
                await self._store.remove(default_address_key(owner))
        except GoAgriClientError as e:
            self._logger.error("💥 Could not save default address for %s: %s", owner, e)
