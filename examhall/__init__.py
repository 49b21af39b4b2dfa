"""Exam hall seating backend."""

__version__ = "0.1.0"
