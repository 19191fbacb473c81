"""Catalog tags."""
from typing import List, Optional

from edusphere.core.errors import MissingFields, TagExists
from edusphere.domain.user import Tag
from edusphere.infrastructure.store import ConstraintViolation, CredentialStore


class TagService:
    def __init__(self, store: CredentialStore):
        self.store = store

    def create(self, name: Optional[str], description: Optional[str]) -> Tag:
        if not name or not description:
            raise MissingFields("All fields are required")
        try:
            return self.store.create_tag(Tag(name=name, description=description))
        except ConstraintViolation:
            raise TagExists()

    def list_all(self) -> List[Tag]:
        return self.store.list_tags()
