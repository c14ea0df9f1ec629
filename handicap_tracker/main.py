from contextlib import asynccontextmanager
from typing import Literal

from fastapi import FastAPI, Depends, HTTPException
from fastapi import Body

from . import config
from .backup import read_latest_backup
from .db import Base, engine, SessionLocal
from .log import init_logging, get_logger
from .roundbook import RoundBook, CommitResult
from .schemas import (
    RoundCreate,
    RoundOut,
    HandicapOut,
    HandicapSummary,
    StatsOut,
    StatsSummary,
    ImportReport,
)
from .store import SqlRoundStore, RoundNotFound


init_logging(config.LOG_LEVEL, config.LOG_FILE)
logger = get_logger(__name__)

Base.metadata.create_all(bind=engine)

book = RoundBook(
    SqlRoundStore(SessionLocal),
    fallback=lambda: read_latest_backup(config.BACKUP_DIR),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    rounds = book.load()
    logger.info("Round book ready with %d rounds", len(rounds))
    yield


app = FastAPI(title="Golf Handicap Tracker", lifespan=lifespan)


def get_book() -> RoundBook:
    return book


def raise_for_failure(result: CommitResult):
    if not result.ok:
        raise HTTPException(status_code=503, detail=result.message)


# Columnas por las que se puede ordenar la tabla de vueltas
SortColumn = Literal[
    "date", "course", "tees", "course_type", "holes", "score", "par",
    "adj_score", "differential", "include_in_handicap",
]


def sort_key(column: str):
    def key(r):
        value = getattr(r, column)
        if isinstance(value, str):
            return value.lower()
        return value
    return key


# ---------------------------------------------------------------------------

@app.get("/health")
def health():
    return {"status": "ok"}


# ================================================================================
# ==================================== ROUNDS ====================================
# ================================================================================

@app.get("/rounds", response_model=list[RoundOut])
def rounds_list(
    sort: SortColumn = "date",
    direction: Literal["asc", "desc"] | None = None,
    book: RoundBook = Depends(get_book),
):
    rounds = book.snapshot()
    # por defecto: fecha descendente, resto ascendente
    if direction is None:
        direction = "desc" if sort == "date" else "asc"
    return sorted(rounds, key=sort_key(sort), reverse=(direction == "desc"))


@app.post("/rounds", response_model=RoundOut, status_code=201)
def round_create(payload: RoundCreate, book: RoundBook = Depends(get_book)):
    result = book.add_round(payload)
    raise_for_failure(result)
    return result.round


@app.patch("/rounds/{round_id}/include", response_model=RoundOut)
def round_toggle_include(round_id: str, book: RoundBook = Depends(get_book)):
    try:
        result = book.toggle_inclusion(round_id)
    except RoundNotFound:
        raise HTTPException(status_code=404, detail="Round not found")
    raise_for_failure(result)
    return result.round


@app.delete("/rounds/{round_id}", status_code=204)
def round_delete(round_id: str, book: RoundBook = Depends(get_book)):
    try:
        result = book.delete_round(round_id)
    except RoundNotFound:
        raise HTTPException(status_code=404, detail="Round not found")
    raise_for_failure(result)


@app.post("/rounds/import", response_model=ImportReport)
def rounds_import(records: list[dict] = Body(...), book: RoundBook = Depends(get_book)):
    # filas tal como vienen de la hoja (todo texto)
    return book.import_records(records)


# ================================================================================
# ============================== HANDICAP / STATS ================================
# ================================================================================

def handicap_out(result) -> HandicapOut:
    if result is None:
        return HandicapOut()
    return HandicapOut(**result)


@app.get("/handicap", response_model=HandicapSummary)
def handicap(book: RoundBook = Depends(get_book)):
    return HandicapSummary(
        overall=handicap_out(book.handicap()),
        regulation=handicap_out(book.handicap(regulation_only=True)),
    )


@app.get("/stats", response_model=StatsSummary)
def stats(book: RoundBook = Depends(get_book)):
    return StatsSummary(
        all_courses=StatsOut(**book.stats()),
        regulation=StatsOut(**book.stats(regulation_only=True)),
    )
