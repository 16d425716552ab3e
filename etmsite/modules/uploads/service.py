"""
Upload Service
==============

Image uploads for the admin panel.

Both the file extension and the sniffed content type must be on the
allow-lists; the extension alone is never trusted.
"""

import io
import logging
import re

from PIL import Image, UnidentifiedImageError

from ...core import storage
from ...core.errors import ServerError, ValidationError

logger = logging.getLogger(__name__)

SVG_MIME = 'image/svg+xml'
_SVG_ROOT_RE = re.compile(rb'^\s*(<\?xml[^>]*>\s*)?(<!--.*?-->\s*)*(<!DOCTYPE[^>]*>\s*)?<svg[\s>]', re.IGNORECASE | re.DOTALL)


def sniff_mime(file_bytes):
    """Detect the MIME type from content. Returns None when unrecognised."""
    if _SVG_ROOT_RE.match(file_bytes[:4096]):
        return SVG_MIME
    try:
        with Image.open(io.BytesIO(file_bytes)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError, ValueError):
        return None
    return Image.MIME.get(fmt) if fmt else None


def file_extension(filename):
    if not filename or '.' not in filename:
        return ''
    return filename.rsplit('.', 1)[1].lower()


class UploadService:

    def __init__(self, settings, log=None, clock=None):
        self.settings = settings
        self.log = log
        self.clock = clock

    def handle(self, file, admin_id=None):
        """Validate and store one uploaded file (a werkzeug FileStorage).

        Returns the response payload: url, filename, size and mime.
        """
        if file is None:
            raise ValidationError('Файл не загружен', status_code=400)
        if not file.filename:
            raise ValidationError('Файл не выбран', status_code=400)

        # Never buffer more than max_file_size + 1 bytes
        file_bytes = file.read(self.settings.max_file_size + 1)
        size = len(file_bytes)
        if size == 0:
            raise ValidationError('Файл загружен частично', status_code=400)

        if size > self.settings.max_file_size:
            max_mb = self.settings.max_file_size / 1024 / 1024
            raise ValidationError(f"Файл слишком большой. Максимум: {max_mb:g} MB", status_code=400)

        ext = file_extension(file.filename)
        if ext not in self.settings.allowed_extensions:
            allowed = ', '.join(self.settings.allowed_extensions)
            raise ValidationError(f"Недопустимый формат файла. Разрешены: {allowed}", status_code=400)

        mime = sniff_mime(file_bytes)
        if mime not in self.settings.allowed_mime_types:
            raise ValidationError('Недопустимый тип файла', status_code=400)

        subfolder = storage.month_bucket(self.clock() if self.clock else None)
        filename = storage.unique_filename(ext)
        try:
            storage.save_file(file_bytes, filename, self.settings.upload_dir, subfolder)
        except OSError as e:
            logger.error(f"Error saving upload {filename}: {e}")
            if self.log:
                self.log.log_error_with_traceback('upload', e, {'filename': filename})
            raise ServerError('Не удалось сохранить файл') from e

        if self.log:
            self.log.info('upload', f"Uploaded {subfolder}/{filename} ({size} bytes)", user_id=admin_id)

        return {
            'success': True,
            'url': storage.public_url(self.settings.upload_url_prefix, subfolder, filename),
            'filename': filename,
            'size': size,
            'mime': mime,
        }
