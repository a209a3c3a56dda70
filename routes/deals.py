# routes/deals.py
"""
Deal routes: customers, intake chat, required forms, previews and the
document package download.
"""

import io

from flask import Blueprint, jsonify, request, send_file

from dealdocs import customer_store, intake, message_store
from dealdocs.template_store import get_template_store
from dealdocs.paperwork import (
    DocumentError,
    DocumentFiller,
    TemplateNotFoundError,
    TemplateReadError,
    UnknownFormError,
    determine_stage,
    generate_deal_package,
    get_form_or_raise,
    get_form_readiness,
    get_required_forms,
)

deals_bp = Blueprint('deals', __name__, url_prefix='/api/customers')


def _filler():
    return DocumentFiller(get_template_store())


def _not_found(customer_id):
    return jsonify({'success': False, 'error': f'Customer {customer_id} not found'}), 404


def _forms_summary(customer):
    """Required forms with readiness, as shown on the forms panel."""
    forms = []
    for required in get_required_forms(customer):
        entry = required.to_dict()
        entry['readiness'] = get_form_readiness(required.form.id, customer).to_dict()
        forms.append(entry)
    return forms


# =============================================================================
# CUSTOMERS
# =============================================================================

@deals_bp.route('', methods=['GET'])
def list_customers():
    """List all customers, newest first."""
    return jsonify({'success': True, 'customers': customer_store.list_customers()})


@deals_bp.route('', methods=['POST'])
def create_customer():
    """Create a customer with an empty profile."""
    customer = customer_store.create_customer()
    return jsonify({'success': True, 'customer': customer}), 201


@deals_bp.route('/<customer_id>', methods=['GET'])
def get_customer(customer_id):
    """Get a customer's profile, stage and required forms."""
    customer = customer_store.get_customer(customer_id)
    if customer is None:
        return _not_found(customer_id)

    return jsonify({
        'success': True,
        'customer': customer,
        'stage': determine_stage(customer).value,
        'required_forms': _forms_summary(customer)
    })


@deals_bp.route('/<customer_id>', methods=['PATCH'])
def update_customer(customer_id):
    """Deep-merge partial profile data into a customer."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'success': False, 'error': 'Expected a JSON object'}), 400

    customer = customer_store.update_customer(customer_id, data)
    if customer is None:
        return _not_found(customer_id)
    return jsonify({'success': True, 'customer': customer})


# =============================================================================
# INTAKE CHAT
# =============================================================================

@deals_bp.route('/<customer_id>/messages', methods=['GET'])
def list_messages(customer_id):
    return jsonify({'success': True, 'messages': message_store.get_messages(customer_id)})


@deals_bp.route('/<customer_id>/messages', methods=['POST'])
def post_message(customer_id):
    """Store a salesperson message and fold any extracted data into the profile."""
    data = request.get_json(silent=True) or {}
    text = (data.get('text') or '').strip()
    if not text:
        return jsonify({'success': False, 'error': 'Message text is required'}), 400

    try:
        reply, customer = intake.process_message(customer_id, text)
    except LookupError:
        return _not_found(customer_id)

    return jsonify({'success': True, 'reply': reply, 'customer': customer})


@deals_bp.route('/<customer_id>/license', methods=['POST'])
def upload_license(customer_id):
    """Scan an uploaded driver's license photo."""
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        return jsonify({'success': False, 'error': 'License image is required'}), 400

    try:
        reply, customer = intake.process_license_image(
            customer_id, upload.filename, upload.read(), upload.mimetype or 'image/jpeg'
        )
    except LookupError:
        return _not_found(customer_id)

    return jsonify({'success': True, 'reply': reply, 'customer': customer})


# =============================================================================
# FORMS
# =============================================================================

@deals_bp.route('/<customer_id>/forms', methods=['GET'])
def required_forms(customer_id):
    """Required forms for the customer, each with readiness warnings."""
    customer = customer_store.get_customer(customer_id)
    if customer is None:
        return _not_found(customer_id)

    return jsonify({
        'success': True,
        'stage': determine_stage(customer).value,
        'forms': _forms_summary(customer)
    })


@deals_bp.route('/<customer_id>/forms/<form_id>/preview', methods=['GET'])
def preview_form(customer_id, form_id):
    """Values that would be written to each template field."""
    customer = customer_store.get_customer(customer_id)
    if customer is None:
        return _not_found(customer_id)

    try:
        form = get_form_or_raise(form_id)
    except UnknownFormError as e:
        return jsonify({'success': False, 'error': str(e)}), 404

    fields = _filler().generate_preview_data(form.id, customer)
    return jsonify({
        'success': True,
        'form': form.to_dict(),
        'fields': [f.to_dict() for f in fields]
    })


@deals_bp.route('/<customer_id>/package', methods=['POST'])
def download_package(customer_id):
    """
    Generate every required form (or the form ids posted) and return a ZIP.
    """
    customer = customer_store.get_customer(customer_id)
    if customer is None:
        return _not_found(customer_id)

    data = request.get_json(silent=True) or {}
    forms = None
    try:
        if data.get('form_ids'):
            forms = [get_form_or_raise(form_id) for form_id in data['form_ids']]
        package = generate_deal_package(_filler(), customer, forms=forms)
    except (UnknownFormError, TemplateNotFoundError) as e:
        return jsonify({'success': False, 'error': str(e)}), 404
    except TemplateReadError as e:
        return jsonify({'success': False, 'error': str(e)}), 422
    except DocumentError as e:
        return jsonify({'success': False, 'error': str(e)}), 500

    return send_file(
        io.BytesIO(package.content),
        mimetype='application/zip',
        as_attachment=True,
        download_name=package.filename
    )
