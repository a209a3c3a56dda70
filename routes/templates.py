# routes/templates.py
"""
Template admin routes: upload PDF templates and map their fields to
customer data.
"""

from flask import Blueprint, jsonify, request

from dealdocs.template_store import get_template_store
from dealdocs.paperwork import (
    PathResolver,
    TemplateReadError,
    UnknownFormError,
    get_form_or_raise,
    mappable_special_keys,
)

templates_bp = Blueprint('templates', __name__, url_prefix='/api/templates')

# Profile sections offered in the mapping picker, in display order
MAPPABLE_GROUPS = (
    ('Personal Info', 'personal_info'),
    ('Vehicle Info', 'vehicle_info'),
    ('Financial Info', 'financial_info'),
)


def mappable_keys():
    """Mapping targets grouped for the admin field picker."""
    profile_keys = PathResolver.get_profile_flat_keys()
    groups = [{'group': 'Special Values', 'keys': mappable_special_keys()}]
    for label, section in MAPPABLE_GROUPS:
        groups.append({
            'group': label,
            'keys': [k for k in profile_keys if k.startswith(f"{section}.")]
        })
    return groups


@templates_bp.route('', methods=['GET'])
def template_statuses():
    """Upload status for every catalog form."""
    return jsonify({'success': True, 'templates': get_template_store().get_statuses()})


@templates_bp.route('/mappable-keys', methods=['GET'])
def list_mappable_keys():
    return jsonify({'success': True, 'groups': mappable_keys()})


@templates_bp.route('/<form_id>', methods=['POST'])
def upload_template(form_id):
    """Upload a PDF template and discover its fields."""
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        return jsonify({'success': False, 'error': 'PDF file is required'}), 400

    store = get_template_store()
    try:
        fields = store.upload_template(form_id, upload.read(), upload.filename)
    except UnknownFormError as e:
        return jsonify({'success': False, 'error': str(e)}), 404
    except TemplateReadError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    return jsonify({
        'success': True,
        'discovered_fields': fields,
        'templates': store.get_statuses()
    })


@templates_bp.route('/<form_id>/mapping', methods=['GET'])
def get_mapping(form_id):
    """Discovered fields and saved mapping for a form."""
    try:
        form = get_form_or_raise(form_id)
    except UnknownFormError as e:
        return jsonify({'success': False, 'error': str(e)}), 404

    store = get_template_store()
    return jsonify({
        'success': True,
        'form': form.to_dict(),
        'discovered_fields': store.get_discovered_fields(form.id),
        'mapping': store.get_mapping(form.id)
    })


@templates_bp.route('/<form_id>/mapping', methods=['PUT'])
def save_mapping(form_id):
    """Replace a form's saved field mapping."""
    data = request.get_json(silent=True)
    mapping = (data or {}).get('mapping')
    if not isinstance(mapping, dict):
        return jsonify({'success': False, 'error': "Expected {'mapping': {...}}"}), 400

    try:
        saved = get_template_store().save_mapping(form_id, mapping)
    except UnknownFormError as e:
        return jsonify({'success': False, 'error': str(e)}), 404

    return jsonify({'success': True, 'mapping': saved})
