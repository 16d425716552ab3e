"""
Uploads Module
==============

Authenticated image uploads stored under UPLOAD_DIR/<year-month>/.
"""

from .service import UploadService, sniff_mime

__all__ = ['UploadService', 'sniff_mime']
