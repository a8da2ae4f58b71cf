"""Client for Google's Perspective comment analyzer."""

from travis.perspective.perspective_client import PerspectiveClient, PERSPECTIVE_ENDPOINT

__all__ = ["PerspectiveClient", "PERSPECTIVE_ENDPOINT"]
