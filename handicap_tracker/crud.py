from sqlalchemy.orm import Session
from . import models, schemas


#---------------------------------------------------------------------------------
# ------------------------------------- Rounds ------------------------------------
# --------------------------------------------------------------------------------

def get_rounds(db: Session):
    return (
        db.query(models.Round)
        .order_by(models.Round.date.desc(), models.Round.created_at.desc())
        .all()
    )

def get_round(db: Session, round_id: str):
    return db.query(models.Round).filter(models.Round.id == round_id).first()

def create_round(db: Session, data: schemas.RoundOut):
    """
    Guarda una vuelta ya calculada (diferencial incluido).
    No se recalcula nada aquí.
    """
    fields = data.model_dump()
    fields["course_type"] = data.course_type.value
    r = models.Round(**fields)
    db.add(r)
    db.commit()
    db.refresh(r)
    return r

def update_round(db: Session, round_id: str, data: schemas.RoundUpdate):
    r = get_round(db, round_id)
    if not r:
        return None
    # solo include_in_handicap; el resto de campos no cambia nunca
    for k, v in data.model_dump().items():
        setattr(r, k, v)
    db.commit()
    db.refresh(r)
    return r

def delete_round(db: Session, round_id: str):
    r = get_round(db, round_id)
    if not r:
        return False
    db.delete(r)
    db.commit()
    return True
