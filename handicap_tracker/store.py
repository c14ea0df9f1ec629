from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from . import crud, schemas


class PersistenceError(Exception):
    """The round store could not complete an operation."""


class RoundNotFound(LookupError):
    pass


class RoundStore(Protocol):
    def list_all(self) -> list[schemas.RoundOut]: ...

    def create(self, round_: schemas.RoundOut) -> None: ...

    def update(self, round_id: str, changes: schemas.RoundUpdate) -> None: ...

    def delete(self, round_id: str) -> None: ...


class SqlRoundStore:
    """RoundStore sobre SQLAlchemy: una sesión por operación."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def list_all(self):
        try:
            with self.session_factory() as db:
                return [schemas.RoundOut.model_validate(r) for r in crud.get_rounds(db)]
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to load rounds") from e

    def create(self, round_):
        try:
            with self.session_factory() as db:
                crud.create_round(db, round_)
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to save round") from e

    def update(self, round_id, changes):
        try:
            with self.session_factory() as db:
                updated = crud.update_round(db, round_id, changes)
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to update round") from e
        if updated is None:
            raise RoundNotFound(round_id)

    def delete(self, round_id):
        try:
            with self.session_factory() as db:
                deleted = crud.delete_round(db, round_id)
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to delete round") from e
        if not deleted:
            raise RoundNotFound(round_id)
