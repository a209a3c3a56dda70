"""
Template Store

PDF templates, their discovered field names and their saved field
mappings, one record per catalog form.

Two backends share the same methods:
    SupabaseTemplateStore: `pdf_templates` table + `templates` storage bucket
    LocalTemplateStore:    a directory of <form_id>.pdf + <form_id>.yml files

Missing records degrade to empty results ([] / {} / None). Storage and
database errors propagate to the caller.

Local mapping file format (<form_id>.yml):
    file_name: interview.pdf
    discovered_fields:
      - CustomerName
      - Date
    field_mappings:
      CustomerName: personal_info.full_name
      Date: __CURRENT_DATE__
"""

import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from config import Config
from .supabase_client import delete_file, download_file, get_supabase_client, upload_file
from .paperwork.catalog import all_forms, get_form_or_raise
from .paperwork.exceptions import ConfigurationError
from .paperwork.pdf_template import discover_fields

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = 'application/pdf'


def clean_mapping(mapping: Dict[str, Any]) -> Dict[str, str]:
    """Drop unmapped entries (empty targets) and coerce names to strings."""
    return {str(field): str(target) for field, target in (mapping or {}).items() if target}


def template_status(form_id: str, file_name: Optional[str], uploaded: bool) -> Dict[str, Any]:
    return {'form_id': form_id, 'uploaded': uploaded, 'file_name': file_name}


class SupabaseTemplateStore:
    """Templates stored in Supabase (table rows + storage bucket)."""

    def __init__(self, table: str = None, bucket: str = None):
        self.table_name = table or Config.PDF_TEMPLATES_TABLE
        self.bucket = bucket or Config.TEMPLATES_BUCKET

    def _table(self):
        return get_supabase_client().table(self.table_name)

    def _get_row(self, form_id: str, columns: str) -> Optional[Dict[str, Any]]:
        response = self._table().select(columns).eq('id', form_id).limit(1).execute()
        return response.data[0] if response.data else None

    def _initialize_templates(self) -> None:
        """Ensure every catalog form has a row."""
        rows = [{'id': form.id, 'name': form.name} for form in all_forms()]
        self._table().upsert(rows, on_conflict='id').execute()

    def get_statuses(self) -> List[Dict[str, Any]]:
        """Upload status for every catalog form, in catalog order."""
        self._initialize_templates()
        response = self._table().select('id, file_name, storage_path').execute()
        rows = {row['id']: row for row in (response.data or [])}

        statuses = []
        for form in all_forms():
            row = rows.get(form.id) or {}
            statuses.append(template_status(
                form.id, row.get('file_name'), bool(row.get('storage_path'))
            ))
        return statuses

    def upload_template(self, form_id: str, raw: bytes, file_name: str) -> List[str]:
        """
        Store a PDF template and record its discovered fields.

        Returns:
            The discovered field names

        Raises:
            UnknownFormError: form_id is not in the catalog
            TemplateReadError: raw is not a readable PDF
        """
        get_form_or_raise(form_id)
        fields = discover_fields(raw)

        storage_path = f"{form_id}-{int(time.time() * 1000)}.pdf"
        upload_file(self.bucket, storage_path, raw, PDF_CONTENT_TYPE)

        try:
            self._table().update({
                'file_name': file_name,
                'storage_path': storage_path,
                'discovered_fields': fields,
                'updated_at': datetime.now(timezone.utc).isoformat(),
            }).eq('id', form_id).execute()
        except Exception as e:
            logger.error(f"Error updating template record for {form_id}: {e}")
            delete_file(self.bucket, storage_path)
            raise

        logger.info(f"Uploaded template for {form_id} with {len(fields)} field(s)")
        return fields

    def get_discovered_fields(self, form_id: str) -> List[str]:
        row = self._get_row(form_id, 'discovered_fields')
        return list((row or {}).get('discovered_fields') or [])

    def get_template_bytes(self, form_id: str) -> Optional[bytes]:
        """Download a form's template, or None if none was uploaded."""
        row = self._get_row(form_id, 'storage_path')
        storage_path = (row or {}).get('storage_path')
        if not storage_path:
            logger.warning(f"No template uploaded for {form_id}")
            return None
        return download_file(self.bucket, storage_path)

    def get_mapping(self, form_id: str) -> Dict[str, str]:
        row = self._get_row(form_id, 'mappings')
        return dict((row or {}).get('mappings') or {})

    def save_mapping(self, form_id: str, mapping: Dict[str, Any]) -> Dict[str, str]:
        get_form_or_raise(form_id)
        cleaned = clean_mapping(mapping)
        try:
            self._table().update({
                'mappings': cleaned,
                'updated_at': datetime.now(timezone.utc).isoformat(),
            }).eq('id', form_id).execute()
        except Exception as e:
            logger.error(f"Error saving mappings for {form_id}: {e}")
            raise
        return cleaned


class LocalTemplateStore:
    """Templates stored as files in a directory (development and tests)."""

    def __init__(self, directory: str = None):
        self.directory = Path(directory or Config.LOCAL_TEMPLATES_DIR)

    def _pdf_path(self, form_id: str) -> Path:
        return self.directory / f"{form_id}.pdf"

    def _meta_path(self, form_id: str) -> Path:
        return self.directory / f"{form_id}.yml"

    def _load_meta(self, form_id: str) -> Dict[str, Any]:
        path = self._meta_path(form_id)
        if not path.exists():
            logger.debug(f"No template metadata file: {path}")
            return {}
        try:
            return yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"{path.name}: YAML syntax error: {e}")

    def _save_meta(self, form_id: str, meta: Dict[str, Any]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._meta_path(form_id).write_text(
            yaml.safe_dump(meta, default_flow_style=False, sort_keys=False)
        )

    def get_statuses(self) -> List[Dict[str, Any]]:
        return [
            template_status(
                form.id,
                self._load_meta(form.id).get('file_name'),
                self._pdf_path(form.id).exists()
            )
            for form in all_forms()
        ]

    def upload_template(self, form_id: str, raw: bytes, file_name: str) -> List[str]:
        get_form_or_raise(form_id)
        fields = discover_fields(raw)

        self.directory.mkdir(parents=True, exist_ok=True)
        self._pdf_path(form_id).write_bytes(raw)

        meta = self._load_meta(form_id)
        meta['file_name'] = file_name
        meta['discovered_fields'] = fields
        meta.setdefault('field_mappings', {})
        self._save_meta(form_id, meta)

        logger.info(f"Stored template for {form_id} with {len(fields)} field(s)")
        return fields

    def get_discovered_fields(self, form_id: str) -> List[str]:
        return list(self._load_meta(form_id).get('discovered_fields') or [])

    def get_template_bytes(self, form_id: str) -> Optional[bytes]:
        path = self._pdf_path(form_id)
        if not path.exists():
            logger.warning(f"No template file: {path}")
            return None
        return path.read_bytes()

    def get_mapping(self, form_id: str) -> Dict[str, str]:
        return dict(self._load_meta(form_id).get('field_mappings') or {})

    def save_mapping(self, form_id: str, mapping: Dict[str, Any]) -> Dict[str, str]:
        get_form_or_raise(form_id)
        cleaned = clean_mapping(mapping)
        meta = self._load_meta(form_id)
        meta['field_mappings'] = cleaned
        self._save_meta(form_id, meta)
        return cleaned


TEMPLATE_STORE_BACKENDS = {
    'supabase': SupabaseTemplateStore,
    'local': LocalTemplateStore,
}


def get_template_store():
    """Build the template store selected by TEMPLATE_STORE_BACKEND."""
    backend = TEMPLATE_STORE_BACKENDS.get(Config.TEMPLATE_STORE_BACKEND)
    if backend is None:
        raise ConfigurationError(
            f"Unknown TEMPLATE_STORE_BACKEND '{Config.TEMPLATE_STORE_BACKEND}'. "
            f"Available: {sorted(TEMPLATE_STORE_BACKENDS)}"
        )
    return backend()
