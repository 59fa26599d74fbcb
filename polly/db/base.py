"""Database base class and model imports."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models here so metadata.create_all sees every table
from polly.db.models.user import User  # noqa: F401, E402
from polly.db.models.poll import Poll  # noqa: F401, E402
from polly.db.models.vote import Vote  # noqa: F401, E402
