"""
Record kinds served by the API: projects, partners and certificates.
"""

from ...core.database import certificates, partners, projects
from .schema import Field, FieldKind, ResourceSpec

TITLE_LENGTH_ERROR = 'Название должно содержать минимум 3 символа'
NAME_LENGTH_ERROR = 'Название должно содержать минимум 2 символа'
IMAGE_URL_ERROR = 'Некорректный URL изображения'


def _order_field(default):
    return Field('order', FieldKind.INTEGER, column='sort_order', default=default)


PROJECTS = ResourceSpec(
    name='projects',
    table=projects,
    fields=(
        Field('title', required=True, min_length=3, length_error=TITLE_LENGTH_ERROR),
        Field('year', FieldKind.INTEGER, required=True, min_value=2000, max_value=2100,
              default=0, invalid_error='Некорректный год'),
        Field('category', required=True),
        Field('client'),
        Field('location'),
        # Editor HTML, stored as-is and sanitized on read
        Field('description', FieldKind.RICH_TEXT),
        Field('image_url', FieldKind.URL, invalid_error=IMAGE_URL_ERROR),
        Field('tags', FieldKind.TAGS),
        _order_field(0),
    ),
    default_sort='-year',
    fallback_sort_column='year',
    sort_columns={
        'year': 'year',
        'title': 'title',
        'category': 'category',
        'created_at': 'created_at',
        'updated_at': 'updated_at',
        'order': 'sort_order',
    },
    not_found='Проект не найден',
    id_required='ID проекта обязателен',
    created='Проект создан',
    updated='Проект обновлён',
    deleted='Проект удалён',
)

PARTNERS = ResourceSpec(
    name='partners',
    table=partners,
    fields=(
        Field('name', required=True, min_length=2, length_error=NAME_LENGTH_ERROR),
        Field('logo_url', FieldKind.URL, required=True, invalid_error='Некорректный URL логотипа'),
        Field('website', FieldKind.URL, invalid_error='Некорректный URL сайта'),
        Field('description'),
        _order_field(1),
    ),
    default_sort='order',
    fallback_sort_column='sort_order',
    not_found='Партнёр не найден',
    id_required='ID партнёра обязателен',
    created='Партнёр создан',
    updated='Партнёр обновлён',
    deleted='Партнёр удалён',
)

CERTIFICATES = ResourceSpec(
    name='certificates',
    table=certificates,
    fields=(
        Field('title', required=True, min_length=3, length_error=TITLE_LENGTH_ERROR),
        Field('number', required=True),
        Field('issued_date', FieldKind.DATE, invalid_error='Некорректная дата выдачи'),
        Field('expiry_date', FieldKind.DATE, invalid_error='Некорректная дата окончания'),
        Field('image_url', FieldKind.URL, required=True, invalid_error=IMAGE_URL_ERROR),
        Field('pdf_url', FieldKind.URL, invalid_error='Некорректный URL PDF'),
        Field('description'),
        _order_field(1),
    ),
    default_sort='order',
    fallback_sort_column='sort_order',
    not_found='Сертификат не найден',
    id_required='ID сертификата обязателен',
    created='Сертификат создан',
    updated='Сертификат обновлён',
    deleted='Сертификат удалён',
)

RESOURCE_SPECS = (PROJECTS, PARTNERS, CERTIFICATES)
