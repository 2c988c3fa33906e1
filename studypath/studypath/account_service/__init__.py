"""
account_service package

This package contains the credential and session lifecycle of the
StudyPath backend. It includes:

- FastAPI application (`main.py`) and routes (`routes/`)
- SQLAlchemy user model and database integration (`models.py`, `db.py`)
- Password hashing (`passwords.py`) and JWT issuance (`tokens.py`)
- User record store (`users.py`) and Redis session cache (`session_cache.py`)
- Register / login / logout orchestration (`auth_flow.py`)
- Pydantic schemas (`schemas.py`) and settings (`config.py`)
"""
