"""
HTTP facade over the address book.

Routes:
    GET  /health            liveness probe
    GET  /contacts          every stored contact
    POST /contacts          add an array of contacts
    GET  /contacts/search   exact name/domain and fuzzy lookup

Run with: rolodex serve (or uvicorn with the create_app factory).
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from rolodex import __version__
from rolodex.core.collection import Contacts
from rolodex.core.contact import Contact
from rolodex.core.errors import (
    DuplicateContactError,
    ParseError,
    StorageError,
    ValidationError,
)
from rolodex.core.index import DEFAULT_MAX_EDITS
from rolodex.storage import ContactStore
from rolodex.utils.validation import ContactValidator

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """
    Shared state for one running app.

    The lock is held across each load-mutate-save sequence so concurrent
    requests never interleave writes to the store.
    """

    store: ContactStore
    validator: Optional[ContactValidator] = None
    lock: threading.Lock = field(default_factory=threading.Lock)

    def load(self) -> Contacts:
        try:
            return Contacts(self.store.load(), validator=self.validator)
        except (StorageError, ParseError) as e:
            logger.error(f"Failed to load contacts: {e}")
            raise HTTPException(status_code=500, detail=str(e)) from e


class ContactBody(BaseModel):
    name: str
    phone: list[str] | str
    email: str
    tags: list[str] = Field(default_factory=list)


def create_app(state: AppState) -> FastAPI:
    """
    Build the FastAPI application around ``state``.

    Args:
        state: Store, validator and lock shared by all requests

    Returns:
        Configured FastAPI instance
    """
    app = FastAPI(title="Rolodex API", version=__version__)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/contacts")
    def list_contacts() -> list[dict[str, Any]]:
        with state.lock:
            contacts = state.load()
        return [contact.to_dict() for contact in contacts]

    @app.post("/contacts", status_code=201)
    def create_contacts(body: list[ContactBody]) -> list[dict[str, Any]]:
        with state.lock:
            contacts = state.load()
            created = []
            try:
                for item in body:
                    contact = Contact(
                        name=item.name,
                        phone=item.phone,
                        email=item.email,
                        tags=item.tags,
                    )
                    contacts.add(contact)
                    created.append(contact)
            except DuplicateContactError as e:
                raise HTTPException(status_code=409, detail=str(e)) from e
            except ValidationError as e:
                raise HTTPException(status_code=422, detail=str(e)) from e

            try:
                state.store.save(contacts.to_list())
            except StorageError as e:
                logger.error(f"Failed to save contacts: {e}")
                raise HTTPException(status_code=500, detail=str(e)) from e

        logger.info(f"Added {len(created)} contact(s) over HTTP")
        return [contact.to_dict() for contact in created]

    @app.get("/contacts/search")
    def search_contacts(
        name: Optional[str] = None,
        domain: Optional[str] = None,
        fuzzy: Optional[str] = None,
        max_edits: int = DEFAULT_MAX_EDITS,
    ) -> list[dict[str, Any]]:
        if not (name or domain or fuzzy):
            raise HTTPException(
                status_code=400, detail="Provide name, domain or fuzzy"
            )
        with state.lock:
            contacts = state.load()
        positions = contacts.search(
            name=name, domain=domain, fuzzy=fuzzy, max_edits=max_edits
        )
        return [contacts[p].to_dict() for p in positions]

    return app
