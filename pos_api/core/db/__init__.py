from pos_api.core.db.base import Base, BaseModel

# Model modules import BaseModel from here, so they are registered on
# Base.metadata by whoever imports them (main.py, alembic/env.py, tests).
__all__ = ["Base", "BaseModel"]
