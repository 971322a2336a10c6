"""
whisperserve.server - FastAPI application exposing the pipeline over HTTP.
"""

from __future__ import annotations

from whisperserve.server.app import create_app

__all__ = ["create_app"]
