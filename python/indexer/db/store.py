"""Partial merge store over the entity tables.

The store exposes three primitives and nothing else:

- create(entity): full insert; AlreadyExistsError if the key is taken
- merge(model, key, patch): writes only the fields the patch sets;
  NotFoundError if the key is unknown
- get(model, key): NotFoundError if the key is unknown

A merge is a single UPDATE statement, so a failing merge writes nothing.
Merges carrying update_at are additionally guarded against going back in
ledger height: a stored row with a higher update_at is left untouched and
OutOfOrderError is raised. Equal heights are accepted so that re-applying the
same event is idempotent.

The store never commits. Callers own the transaction (see
indexer.db.session.transaction).
"""

from typing import TypeVar

from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from indexer.db.models import Bucket, Object, entity_key
from indexer.errors import AlreadyExistsError, InvalidPatchError, NotFoundError, OutOfOrderError
from indexer.logging import get_logger
from indexer.schemas.patches import FieldPatch

logger = get_logger(__name__)

EntityT = TypeVar("EntityT", Bucket, Object)


class MergeStore:
    """Keyed create/merge/get access to bucket and object records."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, model: type[EntityT], key: str) -> EntityT:
        """Load an entity by its immutable identifier.

        Raises:
            NotFoundError: If no entity exists for key.
        """
        entity = self.db.get(model, key)
        if entity is None:
            raise NotFoundError(f"{model.__tablename__} {key} not found")
        return entity

    def exists(self, model: type[EntityT], key: str) -> bool:
        return self.db.get(model, key) is not None

    def create(self, entity: Bucket | Object) -> None:
        """Insert a full entity record.

        Raises:
            AlreadyExistsError: If an entity with the same key exists.
        """
        model = type(entity)
        key = entity_key(entity)
        if self.exists(model, key):
            raise AlreadyExistsError(f"{model.__tablename__} {key} already exists")

        self.db.add(entity)
        try:
            self.db.flush()
        except IntegrityError as e:
            # Lost a race against another writer for the same key
            raise AlreadyExistsError(f"{model.__tablename__} {key} already exists") from e

        logger.debug("entity_created", table=model.__tablename__, key=key)

    def merge(self, model: type[EntityT], key: str, patch: FieldPatch) -> None:
        """Apply a field patch to an existing entity.

        Only the fields set on the patch are written; zero values and None
        are written as given.

        Raises:
            InvalidPatchError: If the patch sets no fields.
            NotFoundError: If no entity exists for key.
            OutOfOrderError: If the stored entity was updated at a greater height.
        """
        changes = patch.changes()
        if not changes:
            raise InvalidPatchError(f"empty patch for {model.__tablename__} {key}")

        # Mapped attribute, not the Table column, so the session can evaluate it
        primary_key = getattr(model, model.__mapper__.primary_key[0].key)
        stmt = update(model).where(primary_key == key).values(**changes)

        update_at = changes.get("update_at")
        if update_at is not None:
            stmt = stmt.where(or_(model.update_at.is_(None), model.update_at <= update_at))

        result = self.db.execute(stmt.execution_options(synchronize_session="evaluate"))
        if result.rowcount == 0:
            if not self.exists(model, key):
                raise NotFoundError(f"{model.__tablename__} {key} not found")
            raise OutOfOrderError(
                f"{model.__tablename__} {key} already updated past height {update_at}"
            )

        logger.debug(
            "entity_merged",
            table=model.__tablename__,
            key=key,
            fields=sorted(changes),
        )
