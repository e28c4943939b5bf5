"""Management of students, assignments and submitted works, with a JSON API."""

__version__ = "0.1.0"