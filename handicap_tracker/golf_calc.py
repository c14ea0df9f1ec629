import math

REGULATION = "regulation"

SLOPE_NEUTRAL = 113
USGA_FACTOR = 0.96
MIN_ROUNDS_FOR_TREND = 10
TREND_WINDOW = 5


class ComputationError(ValueError):
    """Numeric input that would make a differential meaningless."""


def _require_finite(name: str, value) -> None:
    # bool es subclase de int: no lo aceptamos como número
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ComputationError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ComputationError(f"{name} must be finite, got {value!r}")


def adjust_for_holes(score: int, par: int, holes: int) -> tuple[int, int]:
    """
    Devuelve (adj_score, adj_par) equivalentes a 18 hoyos.
    Solo se doblan score y par; rating y slope ya son valores de 18 hoyos.
    """
    if holes == 9:
        return score * 2, par * 2
    if holes == 18:
        return score, par
    raise ComputationError(f"holes must be 9 or 18, got {holes!r}")


def compute_differential(score, par, rating, slope, holes) -> dict:
    for name, value in (("score", score), ("par", par), ("rating", rating),
                        ("slope", slope), ("holes", holes)):
        _require_finite(name, value)
    if slope <= 0:
        raise ComputationError(f"slope must be positive, got {slope!r}")

    adj_score, adj_par = adjust_for_holes(score, par, holes)
    differential = ((adj_score - rating) * SLOPE_NEUTRAL) / slope

    return {
        "adj_score": adj_score,
        "adj_par": adj_par,
        "differential": round(differential, 2),
    }


# ---------------------------------------------------------------------------
# -------------------------------- Handicap ---------------------------------
# ---------------------------------------------------------------------------

def counts_for_handicap(r) -> bool:
    return bool(r.include_in_handicap)


def counts_for_regulation_handicap(r) -> bool:
    return bool(r.include_in_handicap) and r.course_type == REGULATION


def rounds_to_use(n: int) -> int:
    if n >= 20:
        return 8
    if n >= 10:
        return math.floor(n * 0.4)
    if n >= 5:
        return math.floor(n * 0.3)
    return min(1, n)


def compute_handicap(rounds, regulation_only: bool = False):
    """
    rounds: snapshot de vueltas (cualquier objeto con include_in_handicap,
    course_type y differential)
    devuelve dict {handicap, rounds_used, total_handicap_rounds} o None
    """
    predicate = counts_for_regulation_handicap if regulation_only else counts_for_handicap
    eligible = [r for r in rounds if predicate(r)]

    if not eligible:
        return None

    # sorted() es estable: empates conservan el orden de entrada
    ordered = sorted(eligible, key=lambda r: r.differential)

    n = len(eligible)
    k = rounds_to_use(n)
    best = ordered[:k]

    avg_differential = sum(r.differential for r in best) / k

    return {
        "handicap": avg_differential * USGA_FACTOR,
        "rounds_used": k,
        "total_handicap_rounds": n,
    }


# ---------------------------------------------------------------------------
# ------------------------------- Estadísticas ------------------------------
# ---------------------------------------------------------------------------

def _mean(values) -> float:
    return sum(values) / len(values)


def compute_stats(rounds, predicate=counts_for_handicap) -> dict:
    """
    total, media y mejor adj_score, y tendencia (últimas 5 vs 5 anteriores).
    Sin datos suficientes el valor es None, nunca 0.
    """
    selected = [r for r in rounds if predicate(r)]
    total = len(selected)

    if total == 0:
        return {"total": 0, "avg": None, "best": None, "trend": None}

    scores = [r.adj_score for r in selected]

    trend = None
    if total >= MIN_ROUNDS_FOR_TREND:
        newest_first = sorted(selected, key=lambda r: r.date, reverse=True)
        recent = newest_first[:TREND_WINDOW]
        previous = newest_first[TREND_WINDOW:TREND_WINDOW * 2]
        trend = _mean([r.adj_score for r in recent]) - _mean([r.adj_score for r in previous])

    return {
        "total": total,
        "avg": _mean(scores),
        "best": min(scores),
        "trend": trend,
    }


def display_value(value, signed: bool = False) -> str:
    # Formato de pantalla: 1 decimal, "--" si no hay dato
    if value is None:
        return "--"
    text = f"{value:.1f}"
    if signed and value > 0:
        return f"+{text}"
    return text
