from __future__ import annotations

"""Base exception shared by every error the client raises."""


class NavdataError(Exception):
    """Base exception for navigation-data client failures."""
    pass
