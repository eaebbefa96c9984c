"""
social_service package

This package contains the backend logic for the social service.
It includes:

- FastAPI application factory and handlers (`main.py`, `routes/`)
- SQLAlchemy models and database integration (`models.py`, `db.py`)
- Password hashing and JWT logic (`auth.py`)
- Pydantic schemas (`schemas.py`) and settings (`config.py`)
- Attachment storage (`storage.py`)
"""
