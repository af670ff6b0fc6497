from fastapi import Depends
from sqlalchemy.orm import Session

from baker_recipes.app.core.config import Settings, get_settings
from baker_recipes.app.db.session import get_db


def get_db_session(db: Session = Depends(get_db)) -> Session:
    return db


def get_app_settings() -> Settings:
    return get_settings()
