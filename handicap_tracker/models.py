from sqlalchemy import Column, Integer, String, Float, Date, Boolean, DateTime
from .db import Base
from datetime import datetime


class Round(Base):
    __tablename__ = "rounds"

    id = Column(String(32), primary_key=True, index=True)   # uuid4 hex, opaco
    date = Column(Date, nullable=False, index=True)
    course = Column(String, nullable=False)
    tees = Column(String, nullable=False, default="")
    course_type = Column(String, nullable=False, default="regulation")

    holes = Column(Integer, nullable=False)        # 9 / 18
    score = Column(Integer, nullable=False)        # golpes de los hoyos jugados
    par = Column(Integer, nullable=False)
    adj_score = Column(Integer, nullable=False)    # equivalente 18 hoyos

    rating = Column(Float, nullable=False)         # siempre valor de 18 hoyos
    slope = Column(Integer, nullable=False)
    differential = Column(Float, nullable=False)   # calculado al crear, 2 decimales

    include_in_handicap = Column(Boolean, nullable=False, default=True)

    # solo para desempatar vueltas del mismo día
    created_at = Column(DateTime, default=datetime.utcnow)
