"""
Storage Utility
===============

Local filesystem storage for uploaded images, bucketed by month.
"""

import os
import uuid
from datetime import datetime


def month_bucket(now=None):
    """Subfolder name for uploads made at *now*, e.g. "2026-02" """
    return (now or datetime.now()).strftime('%Y-%m')


def unique_filename(ext):
    """Collision-resistant filename such as "img_3f2a....png" """
    return f"img_{uuid.uuid4().hex}.{ext}"


def save_file(file_bytes, filename, upload_dir, subfolder):
    """Write *file_bytes* to UPLOAD_DIR/subfolder/filename.

    Directories are created as needed. Returns the absolute path written;
    OSError propagates to the caller.
    """
    target_dir = os.path.join(upload_dir, subfolder)
    os.makedirs(target_dir, exist_ok=True)
    filepath = os.path.join(target_dir, filename)
    with open(filepath, 'wb') as f:
        f.write(file_bytes)
    return filepath


def public_url(prefix, subfolder, filename):
    """Relative URL the frontend uses, e.g. "uploads/2026-02/img_x.png" """
    if prefix and not prefix.endswith('/'):
        prefix += '/'
    return f"{prefix}{subfolder}/{filename}"
