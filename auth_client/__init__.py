"""Thin client for the auth API"""

from .api_client import APIClient, APIResult

__all__ = ["APIClient", "APIResult"]
