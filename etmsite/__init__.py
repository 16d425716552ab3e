"""
etmsite - Company Site Content API
==================================

JSON API behind the company website and its admin panel:
- Administrator login with opaque bearer tokens
- Projects, partners and certificates with public reads and guarded writes
- Image uploads
- A Python client for the admin side

Usage:
    from etmsite.app import create_app

    app = create_app()
"""

__version__ = '0.1.0'

from .extension import EtmSite

__all__ = ['EtmSite']
