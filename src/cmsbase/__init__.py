"""cmsbase - headless CMS backend.

Generic CRUD over collections declared in Python, local sign-in sessions
and an image redaction endpoint.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
