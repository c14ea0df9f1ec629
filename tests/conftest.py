import os

# BD en memoria para todos los tests; se fija antes de importar el paquete
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORE_RETRY_DELAY", "0")

from datetime import date, timedelta
from itertools import count

import pytest

from handicap_tracker import models  # noqa: F401  (registra la tabla rounds)
from handicap_tracker.db import Base, engine
from handicap_tracker.schemas import CourseType, RoundOut
from handicap_tracker.store import PersistenceError, RoundNotFound


@pytest.fixture
def make_round():
    ids = count(1)

    def _make(
        differential=10.0,
        adj_score=90,
        played=None,
        course_type=CourseType.regulation,
        include=True,
        holes=18,
        **extra,
    ):
        n = next(ids)
        fields = dict(
            id=f"r{n}",
            date=played or date(2024, 1, 1) + timedelta(days=n),
            course="Pine Valley",
            tees="white",
            course_type=course_type,
            holes=holes,
            score=adj_score if holes == 18 else adj_score // 2,
            par=72 if holes == 18 else 36,
            adj_score=adj_score,
            rating=71.2,
            slope=125,
            differential=differential,
            include_in_handicap=include,
        )
        fields.update(extra)
        return RoundOut(**fields)

    return _make


@pytest.fixture
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


class FakeStore:
    """RoundStore en memoria; falla las primeras `failures` llamadas."""

    def __init__(self, rounds=(), failures=0):
        self.rounds = {r.id: r for r in rounds}
        self.failures = failures
        self.calls = []

    def _maybe_fail(self, op):
        self.calls.append(op)
        if self.failures:
            self.failures -= 1
            raise PersistenceError(f"{op} failed")

    def list_all(self):
        self._maybe_fail("list_all")
        return list(self.rounds.values())

    def create(self, round_):
        self._maybe_fail("create")
        self.rounds[round_.id] = round_

    def update(self, round_id, changes):
        self._maybe_fail("update")
        if round_id not in self.rounds:
            raise RoundNotFound(round_id)
        self.rounds[round_id] = self.rounds[round_id].model_copy(update=changes.model_dump())

    def delete(self, round_id):
        self._maybe_fail("delete")
        if self.rounds.pop(round_id, None) is None:
            raise RoundNotFound(round_id)


@pytest.fixture
def fake_store():
    return FakeStore
