"""
Hospital Records API: patients, doctors, departments and appointments

A FastAPI service exposing uniform CRUD access to four MongoDB collections,
with reads open to everyone and writes restricted to logged-in sessions.
"""

__version__ = "1.0.0"
__description__ = "Hospital records API"
