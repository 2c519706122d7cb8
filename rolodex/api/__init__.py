"""
rolodex.api - Remote transport for contact import and export
"""

from rolodex.api.remote import RemoteClient

__all__ = ["RemoteClient"]
