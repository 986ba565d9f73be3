# path: backend/resume_validation/db/base.py
# Purpose: declarative base shared by the registration model and the job queue table.
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
