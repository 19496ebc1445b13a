"""Consultant skill proficiency and verification engine."""

__version__ = "0.1.0"
