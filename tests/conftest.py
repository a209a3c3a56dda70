"""
Shared test fixtures: profiles, an in-memory template store, a fake
fillable template and a fake Supabase client.

Run with: python -m pytest tests/ -v
"""

import copy
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dealdocs import supabase_client
from dealdocs.paperwork import FieldWriteError, deep_merge, new_profile


def create_mock_profile(**sections):
    """A default profile with the given partial sections merged in."""
    return deep_merge(new_profile(), sections)


def create_full_profile():
    """A profile with every leaf populated."""
    return create_mock_profile(
        personal_info={
            'full_name': 'Jane Doe',
            'first_name': 'Jane',
            'last_name': 'Doe',
            'phone': '614-555-0100',
            'email': 'jane@example.com',
            'address': {
                'full_address': '12 Elm St, Columbus, OH 43004',
                'street': '12 Elm St',
                'city': 'Columbus',
                'state': 'OH',
                'zip': '43004',
            },
            'drivers_license': {
                'number': 'OH123456',
                'expiration': '04-30-2029',
                'state': 'OH',
                'is_expired': False,
            },
        },
        vehicle_info={
            'interest_vehicle': {
                'year': '2024',
                'make': 'Honda',
                'model': 'Accord',
                'stock_number': 'H2291',
                'vin': '1HGCM82633A004352',
            },
            'trade_vehicle': {
                'year': '2016',
                'make': 'Toyota',
                'model': 'Camry',
                'vin': '4T1BF1FK5GU123456',
                'lien_holder': 'Ally Financial',
                'payoff_amount': 8200,
            },
            'trade_in': True,
            'purchase_type': 'new',
        },
        financial_info={
            'employment': {'employer': 'Acme Corp', 'position': 'Engineer', 'income': 85000},
            'financing_needed': True,
            'references': [{'name': 'Bob Roe', 'phone': '614-555-0199', 'relationship': 'Friend'}],
        },
        sales_info={'stage': 'closing', 'salesperson': 'Stephen Schreck'},
    )


class InMemoryTemplateStore:
    """Template store keeping everything in dicts."""

    def __init__(self, fields=None, mappings=None, templates=None):
        self.fields = fields or {}
        self.mappings = mappings or {}
        self.templates = templates or {}

    def get_discovered_fields(self, form_id):
        return list(self.fields.get(form_id, []))

    def get_mapping(self, form_id):
        return dict(self.mappings.get(form_id, {}))

    def get_template_bytes(self, form_id):
        return self.templates.get(form_id)

    def get_statuses(self):
        return [
            {'form_id': form_id, 'uploaded': True, 'file_name': f"{form_id}.pdf"}
            for form_id in self.templates
        ]

    def upload_template(self, form_id, raw, file_name):
        self.templates[form_id] = raw
        return self.get_discovered_fields(form_id)

    def save_mapping(self, form_id, mapping):
        self.mappings[form_id] = dict(mapping)
        return dict(mapping)


class FakeTemplate:
    """
    Fillable template that records writes instead of editing a PDF.

    kinds maps field name -> kind; options maps field name -> allowed options.
    """

    def __init__(self, raw, kinds, options=None, failing=()):
        self.raw = raw
        self.kinds = kinds
        self.options = options or {}
        self.failing = set(failing)
        self.writes = []
        self.flattened = False

    def get_field_kind(self, name):
        if name not in self.kinds:
            raise FieldWriteError(f"No field named '{name}' on template", field_name=name)
        return self.kinds[name]

    def _check(self, name):
        if name in self.failing:
            raise RuntimeError(f"boom writing {name}")

    def set_text(self, name, value):
        self._check(name)
        self.writes.append(('text', name, value))

    def set_checked(self, name, checked):
        self._check(name)
        self.writes.append(('checkbox', name, checked))

    def select_option(self, name, option):
        self._check(name)
        if option not in self.options.get(name, ()):
            raise FieldWriteError(f"Option '{option}' not available", field_name=name)
        self.writes.append(('select', name, option))

    def flatten(self):
        self.flattened = True

    def to_bytes(self):
        return b'FILLED:' + self.raw


class FakeTemplateFactory:
    """Builds FakeTemplates and remembers them for assertions."""

    def __init__(self, kinds=None, options=None, failing=()):
        self.kinds = kinds or {}
        self.options = options or {}
        self.failing = failing
        self.created = []

    def __call__(self, raw):
        template = FakeTemplate(raw, self.kinds, self.options, self.failing)
        self.created.append(template)
        return template


# =============================================================================
# FAKE SUPABASE
# =============================================================================

class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, table, op, payload=None, on_conflict=None):
        self.table = table
        self.op = op
        self.payload = payload
        self.on_conflict = on_conflict
        self.filters = []
        self._limit = None
        self._order = None

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def limit(self, count):
        self._limit = count
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def _matching(self):
        return [r for r in self.table.rows if all(r.get(c) == v for c, v in self.filters)]

    def execute(self):
        if self.table.fail_with is not None:
            raise self.table.fail_with

        if self.op == 'select':
            rows = self._matching()
            if self._order:
                column, desc = self._order
                rows = sorted(rows, key=lambda r: r.get(column) or '', reverse=desc)
            if self._limit is not None:
                rows = rows[:self._limit]
            return FakeResponse(copy.deepcopy(rows))

        if self.op == 'insert':
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for row in payload:
                row = copy.deepcopy(row)
                self.table.counter += 1
                row.setdefault('id', f"id-{self.table.counter}")
                row.setdefault('created_at', f"2026-01-{self.table.counter:02d}T00:00:00+00:00")
                self.table.rows.append(row)
                inserted.append(copy.deepcopy(row))
            return FakeResponse(inserted)

        if self.op == 'update':
            rows = self._matching()
            for row in rows:
                row.update(copy.deepcopy(self.payload))
            return FakeResponse(copy.deepcopy(rows))

        if self.op == 'upsert':
            for new_row in self.payload:
                existing = next(
                    (r for r in self.table.rows if r.get(self.on_conflict) == new_row[self.on_conflict]),
                    None
                )
                if existing:
                    existing.update(copy.deepcopy(new_row))
                else:
                    self.table.rows.append(copy.deepcopy(new_row))
            return FakeResponse(copy.deepcopy(self.payload))

        raise AssertionError(f"Unsupported op {self.op}")


class FakeTable:
    def __init__(self):
        self.rows = []
        self.counter = 0
        self.fail_with = None

    def select(self, columns='*'):
        return FakeQuery(self, 'select')

    def insert(self, payload):
        return FakeQuery(self, 'insert', payload)

    def update(self, payload):
        return FakeQuery(self, 'update', payload)

    def upsert(self, payload, on_conflict=''):
        return FakeQuery(self, 'upsert', payload, on_conflict=on_conflict)


class FakeBucket:
    def __init__(self):
        self.files = {}

    def upload(self, path, file, file_options=None):
        self.files[path] = file

    def download(self, path):
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def remove(self, paths):
        for path in paths:
            self.files.pop(path, None)


class FakeStorage:
    def __init__(self):
        self.buckets = {}

    def from_(self, bucket):
        return self.buckets.setdefault(bucket, FakeBucket())


class FakeSupabaseClient:
    def __init__(self):
        self.tables = {}
        self.storage = FakeStorage()

    def table(self, name):
        return self.tables.setdefault(name, FakeTable())


@pytest.fixture
def fake_supabase():
    """Install a fake Supabase client for the duration of a test."""
    client = FakeSupabaseClient()
    supabase_client.set_supabase_client(client)
    yield client
    supabase_client.set_supabase_client(None)
