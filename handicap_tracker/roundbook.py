import csv
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional
from uuid import uuid4

from . import config
from .golf_calc import (
    compute_differential,
    compute_handicap,
    compute_stats,
    counts_for_handicap,
    counts_for_regulation_handicap,
)
from .log import get_logger
from .schemas import ImportReport, RoundCreate, RoundOut, RoundUpdate
from .backup import decode_records
from .store import PersistenceError, RoundNotFound, RoundStore

logger = get_logger(__name__)

# Mensajes para el usuario según la operación que falló
USER_MESSAGES = {
    "save": "Unable to save your round. Please check your internet connection and try again.",
    "delete": "Unable to delete the round. Please try again.",
    "update": "Unable to update the round. Please try again.",
}


@dataclass(frozen=True)
class CommitResult:
    ok: bool
    round: Optional[RoundOut] = None
    error: Optional[Exception] = None
    message: Optional[str] = None


def newest_first(rounds) -> list:
    # estable: mismo día -> se respeta el orden recibido
    return sorted(rounds, key=lambda r: r.date, reverse=True)


class RoundBook:
    """
    Lista en memoria de vueltas (la que se muestra) + el store que la persiste.

    - toggle: cambio local primero, luego store; si falla se deshace
    - add / delete: store primero, luego cambio local
    - los cálculos reciben siempre una copia (snapshot)
    """

    def __init__(
        self,
        store: RoundStore,
        max_retries: int = config.STORE_MAX_RETRIES,
        retry_delay: float = config.STORE_RETRY_DELAY,
        fallback: Optional[Callable[[], list]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.fallback = fallback
        self._sleep = sleep
        self._lock = threading.Lock()
        self._rounds: list[RoundOut] = []

    # ------------------------------------------------------------------ store

    def _with_retries(self, operation, description: str):
        for attempt in range(1, self.max_retries + 1):
            try:
                return operation()
            except PersistenceError as e:
                if attempt == self.max_retries:
                    logger.error("%s failed after %d attempts: %s", description, attempt, e)
                    raise
                logger.warning(
                    "%s: attempt %d failed, retrying in %.1fs...",
                    description, attempt, self.retry_delay,
                )
                self._sleep(self.retry_delay)

    def load(self) -> list[RoundOut]:
        try:
            rounds = self._with_retries(self.store.list_all, "Loading rounds")
            logger.info("Loaded %d rounds from store", len(rounds))
        except PersistenceError:
            rounds = self._load_fallback()

        with self._lock:
            self._rounds = newest_first(rounds)
            return list(self._rounds)

    def _load_fallback(self) -> list:
        # sin store: backup local si hay, y si no, lista vacía
        if self.fallback is None:
            return []
        try:
            rounds = self.fallback()
        except (OSError, ValueError, csv.Error) as e:
            logger.error("No local backup available: %s", e)
            return []
        logger.info("Loaded %d rounds from local backup", len(rounds))
        return rounds

    # --------------------------------------------------------------- lectura

    def snapshot(self) -> tuple:
        with self._lock:
            return tuple(self._rounds)

    def get(self, round_id: str) -> RoundOut:
        for r in self.snapshot():
            if r.id == round_id:
                return r
        raise RoundNotFound(round_id)

    # ------------------------------------------------------------ mutaciones

    def add_round(self, payload: RoundCreate) -> CommitResult:
        calc = compute_differential(
            payload.score, payload.par, payload.rating, payload.slope, payload.holes
        )
        new_round = RoundOut(
            id=uuid4().hex,
            date=payload.date,
            course=payload.course,
            tees=payload.tees or "",
            course_type=payload.course_type,
            holes=payload.holes,
            score=payload.score,
            par=payload.par,
            adj_score=calc["adj_score"],
            rating=payload.rating,
            slope=payload.slope,
            differential=calc["differential"],
            include_in_handicap=payload.include_in_handicap,
        )

        try:
            self._with_retries(lambda: self.store.create(new_round), "Saving round")
        except PersistenceError as e:
            return CommitResult(ok=False, error=e, message=USER_MESSAGES["save"])

        with self._lock:
            self._rounds = newest_first([new_round] + self._rounds)
        logger.info("Round %s saved (differential %.2f)", new_round.id, new_round.differential)
        return CommitResult(ok=True, round=new_round)

    def _replace(self, updated: RoundOut) -> None:
        with self._lock:
            self._rounds = [updated if r.id == updated.id else r for r in self._rounds]

    def _commit_inclusion(self, round_id: str) -> bool:
        # se envía el valor local actual, no el del momento del toggle
        value = self.get(round_id).include_in_handicap
        self.store.update(round_id, RoundUpdate(include_in_handicap=value))
        return value

    def toggle_inclusion(self, round_id: str) -> CommitResult:
        original = self.get(round_id)
        toggled = original.model_copy(
            update={"include_in_handicap": not original.include_in_handicap}
        )
        self._replace(toggled)

        try:
            committed = self._with_retries(
                lambda: self._commit_inclusion(round_id), "Updating round"
            )
            # otro toggle pudo cambiar la lista mientras se guardaba
            while committed != self.get(round_id).include_in_handicap:
                committed = self._with_retries(
                    lambda: self._commit_inclusion(round_id), "Updating round"
                )
        except (PersistenceError, RoundNotFound) as e:
            # deshacer el cambio optimista, solo si nadie lo ha vuelto a cambiar
            with self._lock:
                self._rounds = [
                    original if r.id == round_id and r == toggled else r
                    for r in self._rounds
                ]
            logger.warning("Round %s inclusion reverted: %s", round_id, e)
            return CommitResult(ok=False, round=original, error=e, message=USER_MESSAGES["update"])

        return CommitResult(ok=True, round=self.get(round_id))

    def delete_round(self, round_id: str) -> CommitResult:
        target = self.get(round_id)

        try:
            self._with_retries(lambda: self.store.delete(round_id), "Deleting round")
        except (PersistenceError, RoundNotFound) as e:
            return CommitResult(ok=False, round=target, error=e, message=USER_MESSAGES["delete"])

        with self._lock:
            self._rounds = [r for r in self._rounds if r.id != round_id]
        logger.info("Round %s deleted", round_id)
        return CommitResult(ok=True, round=target)

    def import_records(self, records) -> ImportReport:
        rounds, rejected = decode_records(records)
        known = {r.id for r in self.snapshot()}
        imported = []

        for r in rounds:
            if r.id in known:
                rejected.append({"id": r.id, "error": "duplicate id"})
                continue
            try:
                self._with_retries(lambda: self.store.create(r), "Importing round")
            except PersistenceError as e:
                rejected.append({"id": r.id, "error": str(e)})
                continue
            known.add(r.id)
            imported.append(r)

        with self._lock:
            self._rounds = newest_first(imported + self._rounds)
        logger.info("Imported %d rounds, %d rejected", len(imported), len(rejected))
        return ImportReport(imported=imported, rejected=rejected)

    # --------------------------------------------------------------- cálculo

    def handicap(self, regulation_only: bool = False):
        return compute_handicap(self.snapshot(), regulation_only=regulation_only)

    def stats(self, regulation_only: bool = False) -> dict:
        predicate = counts_for_regulation_handicap if regulation_only else counts_for_handicap
        return compute_stats(self.snapshot(), predicate)
