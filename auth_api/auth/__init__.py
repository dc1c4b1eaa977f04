"""
Authentication utilities package
"""

from .utils import hash_password, verify_password, create_token, decode_token

__all__ = ['hash_password', 'verify_password', 'create_token', 'decode_token']
