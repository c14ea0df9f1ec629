import csv
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from .golf_calc import ComputationError
from .log import get_logger
from .schemas import RoundOut, StoredRoundRecord

logger = get_logger(__name__)

# Orden de columnas de la hoja original
SHEET_COLUMNS = [
    "id",
    "date",
    "course",
    "tees",
    "courseType",
    "includeInHandicap",
    "holes",
    "score",
    "par",
    "adjScore",
    "rating",
    "slope",
    "differential",
]

BACKUP_PREFIX = "golf_rounds_"


def decode_records(records):
    """
    Convierte filas de texto en vueltas.
    devuelve (rounds, rejected) con rejected = [{"index", "error"}]
    """
    rounds: list[RoundOut] = []
    rejected: list[dict] = []

    for i, record in enumerate(records):
        try:
            rounds.append(StoredRoundRecord.model_validate(record).to_round())
        except (ValidationError, ComputationError) as e:
            logger.warning("Rejected stored round #%d: %s", i, e)
            rejected.append({"index": i, "error": str(e)})

    return rounds, rejected


def to_sheet_row(r: RoundOut) -> dict:
    return {
        "id": r.id,
        "date": r.date.isoformat(),
        "course": r.course,
        "tees": r.tees,
        "courseType": r.course_type.value,
        "includeInHandicap": "true" if r.include_in_handicap else "false",
        "holes": r.holes,
        "score": r.score,
        "par": r.par,
        "adjScore": r.adj_score,
        "rating": r.rating,
        "slope": r.slope,
        "differential": r.differential,
    }


def write_backup(rounds, directory) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    # Nombre del backup con fecha y hora
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S-%f")
    backup_file = directory / f"{BACKUP_PREFIX}{timestamp}.csv"

    with backup_file.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=SHEET_COLUMNS)
        writer.writeheader()
        for r in rounds:
            writer.writerow(to_sheet_row(r))

    logger.info("Backup written: %s (%d rounds)", backup_file.name, len(rounds))
    return backup_file


def latest_backup(directory):
    directory = Path(directory)
    if not directory.is_dir():
        return None
    # el timestamp del nombre ordena cronológicamente
    files = sorted(directory.glob(f"{BACKUP_PREFIX}*.csv"))
    return files[-1] if files else None


def read_latest_backup(directory) -> list[RoundOut]:
    backup_file = latest_backup(directory)
    if backup_file is None:
        return []

    with backup_file.open(newline="", encoding="utf-8") as f:
        rounds, rejected = decode_records(csv.DictReader(f))

    if rejected:
        logger.warning("%d rows in %s could not be decoded", len(rejected), backup_file.name)
    return rounds
