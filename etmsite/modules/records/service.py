"""
Record Resource Handler
=======================

Generic list/get/create/update/delete over one record table, configured by a
ResourceSpec. Mutations are gated by the router before they reach here.

Update is a full replace: every column the ResourceSpec describes is overwritten and
fields missing from the payload fall back to their blank/default value.
"""

import logging

from sqlalchemy import delete, insert, select, update

from ...core.database import utcnow
from ...core.errors import NotFound, ValidationError
from .schema import to_int

logger = logging.getLogger(__name__)


class RecordResource:

    def __init__(self, spec, db, settings, log=None):
        self.spec = spec
        self.db = db
        self.settings = settings
        self.log = log
        self.table = spec.table

    @property
    def name(self):
        return self.spec.name

    # ===== Helpers =====

    def _parse_id(self, record_id):
        value = to_int(record_id)
        if value is None or value <= 0:
            raise NotFound(self.spec.not_found)
        return value

    def _require_id(self, record_id):
        if record_id is None or str(record_id).strip() == '':
            raise ValidationError(self.spec.id_required, status_code=400)
        return self._parse_id(record_id)

    def _clean(self, payload):
        """Validate a payload into column values, aggregating every violation"""
        if not isinstance(payload, dict):
            raise ValidationError('Некорректный JSON', status_code=400)

        errors = []
        values = {}
        for f in self.spec.fields:
            values[f.db_column] = f.clean(payload, errors)
        if errors:
            raise ValidationError(errors=errors)
        return values

    def serialize(self, row):
        """Table row -> API record. Rich text is sanitized here, on every read."""
        record = {'id': str(row['id'])}
        for f in self.spec.fields:
            record[f.name] = f.render(row.get(f.db_column))
        for stamp in ('created_at', 'updated_at'):
            value = row.get(stamp)
            record[stamp] = value.isoformat(sep=' ') if value else None
        return record

    def _exists(self, record_id):
        return self.db.fetch_one(select(self.table.c.id).where(self.table.c.id == record_id)) is not None

    # ===== Operations =====

    def list(self, limit=None, offset=None, sort=None):
        """Paginated, sorted listing with the unpaginated total"""
        limit = to_int(limit, self.settings.default_list_limit)
        limit = min(max(limit, 0), self.settings.max_list_limit)
        offset = max(to_int(offset, 0), 0)

        sort = sort or self.spec.default_sort
        descending = sort.startswith('-')
        column = self.table.c[self.spec.sort_column(sort[1:] if descending else sort)]
        order = column.desc() if descending else column.asc()

        rows = self.db.fetch_all(
            select(self.table)
            .order_by(order, self.table.c.id.asc())
            .limit(limit)
            .offset(offset)
        )
        return {
            'data': [self.serialize(row) for row in rows],
            'total': self.db.count(self.table),
            'limit': limit,
            'offset': offset,
        }

    def get(self, record_id):
        record_id = self._parse_id(record_id)
        row = self.db.fetch_one(select(self.table).where(self.table.c.id == record_id))
        if not row:
            raise NotFound(self.spec.not_found)
        return self.serialize(row)

    def create(self, payload, admin_id=None):
        """Insert a record and return its id as a string"""
        values = self._clean(payload)
        now = utcnow()
        result = self.db.write(insert(self.table).values(created_at=now, updated_at=now, **values))
        new_id = result.inserted_primary_key[0]
        if self.log:
            self.log.info('records', f"Created {self.name} #{new_id}", user_id=admin_id)
        return str(new_id)

    def update(self, record_id, payload, admin_id=None):
        record_id = self._require_id(record_id)
        if not self._exists(record_id):
            raise NotFound(self.spec.not_found)

        values = self._clean(payload)
        self.db.write(
            update(self.table)
            .where(self.table.c.id == record_id)
            .values(updated_at=utcnow(), **values)
        )
        if self.log:
            self.log.info('records', f"Updated {self.name} #{record_id}", user_id=admin_id)
        return True

    def delete(self, record_id, admin_id=None):
        record_id = self._require_id(record_id)
        result = self.db.write(delete(self.table).where(self.table.c.id == record_id))
        if result.rowcount == 0:
            raise NotFound(self.spec.not_found)
        if self.log:
            self.log.info('records', f"Deleted {self.name} #{record_id}", user_id=admin_id)
        return True
