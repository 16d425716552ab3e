"""
Records Module
==============

Portfolio content managed through the admin API.

Provides:
- Projects (title, year, category, rich-text description, tags)
- Partners (name, logo, website)
- Certificates (title, number, validity dates, scan and PDF links)
"""

from .definitions import CERTIFICATES, PARTNERS, PROJECTS, RESOURCE_SPECS
from .schema import Field, FieldKind, ResourceSpec
from .service import RecordResource

__all__ = [
    'RecordResource', 'ResourceSpec', 'Field', 'FieldKind',
    'PROJECTS', 'PARTNERS', 'CERTIFICATES', 'RESOURCE_SPECS',
]
