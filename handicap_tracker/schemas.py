from datetime import date, datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .golf_calc import compute_differential


class CourseType(str, Enum):
    regulation = "regulation"
    executive = "executive"
    par3 = "par3"
    practice = "practice"


def parse_calendar_date(value):
    # "2024-05-01" o "2024-05-01T00:00:00.000Z": nos quedamos con la fecha tal cual,
    # sin pasar por UTC (si no, la vuelta se movería al día anterior)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    return value


# ---------------------------------------------------------------------------
# ------------------------------ Entrada (form) -----------------------------
# ---------------------------------------------------------------------------

class RoundCreate(BaseModel):
    date: date
    course: str = Field(min_length=2)
    tees: Optional[str] = None
    holes: Literal[9, 18]
    score: int = Field(ge=1, le=200)
    par: int = Field(ge=1, le=100)
    rating: float = Field(gt=0, le=150)
    slope: int = Field(ge=55, le=155)
    course_type: CourseType = CourseType.regulation
    include_in_handicap: bool = True

    @field_validator("date", mode="before")
    @classmethod
    def _calendar_date(cls, v):
        return parse_calendar_date(v)

    @field_validator("course", "tees", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class RoundUpdate(BaseModel):
    # solo se permite cambiar si cuenta para el handicap
    include_in_handicap: bool


class RoundOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    date: date
    course: str
    tees: str = ""
    course_type: CourseType = CourseType.regulation
    holes: Literal[9, 18]
    score: int
    par: int
    adj_score: int
    rating: float
    slope: int
    differential: float
    include_in_handicap: bool = True


# ---------------------------------------------------------------------------
# --------------------- Registros guardados como texto ----------------------
# ---------------------------------------------------------------------------

FALSE_MARKER = "false"


def _blank(v) -> bool:
    return v is None or (isinstance(v, str) and v.strip() == "")


class StoredRoundRecord(BaseModel):
    """
    Decodifica una fila de hoja de cálculo (todo texto) a tipos reales.
    Acepta columnas camelCase (id, courseType, adjScore...) o snake_case.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    id: str = Field(min_length=1)
    date: date
    course: str = Field(min_length=1)
    tees: str = ""
    course_type: CourseType = Field(
        default=CourseType.regulation,
        validation_alias=AliasChoices("courseType", "course_type"),
    )
    include_in_handicap: bool = Field(
        default=True,
        validation_alias=AliasChoices("includeInHandicap", "include_in_handicap"),
    )
    holes: Literal[9, 18]
    score: int
    par: int
    adj_score: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("adjScore", "adj_score"),
    )
    rating: float
    slope: int
    differential: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def _drop_blanks(cls, data):
        # celdas vacías = campo ausente, para que apliquen los defaults
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if not _blank(v)}
        return data

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, v):
        return str(v)

    @field_validator("date", mode="before")
    @classmethod
    def _calendar_date(cls, v):
        return parse_calendar_date(v)

    @field_validator("include_in_handicap", mode="before")
    @classmethod
    def _false_marker(cls, v):
        # solo el texto exacto "false" excluye la vuelta
        if isinstance(v, bool):
            return v
        return str(v).strip() != FALSE_MARKER

    @field_validator("holes", mode="before")
    @classmethod
    def _holes_as_int(cls, v):
        if isinstance(v, str) and v.strip().isdigit():
            return int(v.strip())
        return v

    def to_round(self) -> RoundOut:
        # el diferencial guardado manda; solo se calcula si la celda venía vacía
        adj_score = self.adj_score
        differential = self.differential
        if adj_score is None or differential is None:
            calc = compute_differential(self.score, self.par, self.rating, self.slope, self.holes)
            if adj_score is None:
                adj_score = calc["adj_score"]
            if differential is None:
                differential = calc["differential"]

        return RoundOut(
            id=self.id,
            date=self.date,
            course=self.course,
            tees=self.tees,
            course_type=self.course_type,
            holes=self.holes,
            score=self.score,
            par=self.par,
            adj_score=adj_score,
            rating=self.rating,
            slope=self.slope,
            differential=differential,
            include_in_handicap=self.include_in_handicap,
        )


class ImportReport(BaseModel):
    imported: list[RoundOut] = []
    rejected: list[dict] = []


# ---------------------------------------------------------------------------
# ------------------------------- Salida (API) ------------------------------
# ---------------------------------------------------------------------------

class HandicapOut(BaseModel):
    handicap: Optional[float] = None
    rounds_used: int = 0
    total_handicap_rounds: int = 0


class StatsOut(BaseModel):
    total: int
    avg: Optional[float] = None
    best: Optional[int] = None
    trend: Optional[float] = None


class HandicapSummary(BaseModel):
    overall: HandicapOut
    regulation: HandicapOut


class StatsSummary(BaseModel):
    all_courses: StatsOut
    regulation: StatsOut
