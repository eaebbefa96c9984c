"""
social_service tests

Every test builds its own app against a temporary SQLite file and upload
directory (see ``conftest.py``), so tests never share state.
"""
