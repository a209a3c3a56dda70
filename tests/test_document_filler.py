"""
Tests for field previews, template filling, batch generation and the
deal archive.

Run with: python -m pytest tests/test_document_filler.py -v
"""

import io
import zipfile
from datetime import date

import pytest

from conftest import (
    FakeTemplateFactory,
    InMemoryTemplateStore,
    create_full_profile,
    create_mock_profile,
)
from dealdocs.packaging import archive_filename, build_archive, document_filename
from dealdocs.paperwork import (
    DocumentFiller,
    TemplateNotFoundError,
    TemplateReadError,
    generate_deal_package,
    generate_documents,
    get_form_or_raise,
    new_profile,
)
from dealdocs.paperwork import special_values
from dealdocs.paperwork.batch import PACKAGING_LABEL


INTERVIEW_FIELDS = ['CustomerName', 'Phone', 'Email', 'SalePrice', 'TradeIn', 'PurchaseType', 'Notes']

INTERVIEW_MAPPING = {
    'CustomerName': 'personal_info.full_name',
    'Phone': 'personal_info.phone',
    'Email': 'personal_info.email',
    'SalePrice': 'financial_info.employment.income',
    'TradeIn': 'vehicle_info.trade_in',
    'PurchaseType': 'vehicle_info.purchase_type',
}

INTERVIEW_KINDS = {
    'CustomerName': 'text',
    'Phone': 'text',
    'Email': 'text',
    'SalePrice': 'text',
    'TradeIn': 'checkbox',
    'PurchaseType': 'select',
    'Notes': 'text',
}


def create_store(**templates):
    templates = templates or {'interview_sheet': b'%PDF-interview'}
    return InMemoryTemplateStore(
        fields={'interview_sheet': list(INTERVIEW_FIELDS)},
        mappings={'interview_sheet': dict(INTERVIEW_MAPPING)},
        templates=templates,
    )


def create_factory(**kwargs):
    kwargs.setdefault('kinds', dict(INTERVIEW_KINDS))
    kwargs.setdefault('options', {'PurchaseType': ['new', 'used']})
    return FakeTemplateFactory(**kwargs)


# =============================================================================
# PREVIEW
# =============================================================================

class TestGeneratePreviewData:
    """Test the per-field values a form would be filled with."""

    def test_values_and_sources(self):
        filler = DocumentFiller(create_store())
        preview = {f.pdf_field: f for f in filler.generate_preview_data('interview_sheet', create_full_profile())}

        assert preview['CustomerName'].value == 'Jane Doe'
        assert preview['CustomerName'].source_path == 'personal_info.full_name'
        assert preview['TradeIn'].value == 'Yes'
        assert preview['PurchaseType'].value == 'new'

    def test_order_follows_discovered_fields(self):
        filler = DocumentFiller(create_store())
        preview = filler.generate_preview_data('interview_sheet', create_full_profile())
        assert [f.pdf_field for f in preview] == INTERVIEW_FIELDS

    def test_manual_entry_overrides_mapping(self):
        filler = DocumentFiller(create_store())
        preview = {f.pdf_field: f for f in filler.generate_preview_data('interview_sheet', create_full_profile())}

        assert preview['SalePrice'].value == '[Manual Entry]'
        assert preview['SalePrice'].source_path == 'N/A'

    def test_unmapped_field(self):
        filler = DocumentFiller(create_store())
        preview = {f.pdf_field: f for f in filler.generate_preview_data('interview_sheet', create_full_profile())}

        assert preview['Notes'].value == '---'
        assert preview['Notes'].source_path == 'Not Mapped'

    def test_empty_profile_values(self):
        filler = DocumentFiller(create_store())
        preview = {f.pdf_field: f.value for f in filler.generate_preview_data('interview_sheet', new_profile())}

        assert preview['CustomerName'] == '---'
        assert preview['TradeIn'] == 'No'

    def test_special_value_mapping(self, monkeypatch):
        monkeypatch.setattr(special_values, 'dealership_today', lambda: date(2026, 5, 1))
        store = InMemoryTemplateStore(
            fields={'delivery_report': ['Date', 'Vehicle']},
            mappings={'delivery_report': {'Date': '__CURRENT_DATE__', 'Vehicle': '__INTEREST_VEHICLE_YMM__'}},
        )
        preview = DocumentFiller(store).generate_preview_data('delivery_report', create_full_profile())

        assert [(f.value, f.source_path) for f in preview] == [
            ('5/1/2026', '__CURRENT_DATE__'),
            ('2024 Honda Accord', '__INTEREST_VEHICLE_YMM__'),
        ]

    def test_no_discovered_fields(self):
        filler = DocumentFiller(InMemoryTemplateStore())
        assert filler.generate_preview_data('privacy_policy', create_full_profile()) == []

    def test_idempotent(self):
        filler = DocumentFiller(create_store())
        profile = create_full_profile()
        first = filler.generate_preview_data('interview_sheet', profile)
        second = filler.generate_preview_data('interview_sheet', profile)
        assert first == second


# =============================================================================
# DOCUMENT BYTES
# =============================================================================

class TestGenerateDocumentBytes:
    """Test filling and flattening a single template."""

    def test_writes_fillable_values(self):
        factory = create_factory()
        filler = DocumentFiller(create_store(), template_factory=factory)
        form = get_form_or_raise('interview_sheet')

        content = filler.generate_document_bytes(form, create_full_profile())

        template = factory.created[0]
        assert content == b'FILLED:%PDF-interview'
        assert template.flattened is True
        assert template.writes == [
            ('text', 'CustomerName', 'Jane Doe'),
            ('text', 'Phone', '614-555-0100'),
            ('text', 'Email', 'jane@example.com'),
            ('checkbox', 'TradeIn', True),
            ('select', 'PurchaseType', 'new'),
        ]

    def test_placeholders_never_written(self):
        factory = create_factory()
        filler = DocumentFiller(create_store(), template_factory=factory)

        filler.generate_document_bytes(get_form_or_raise('interview_sheet'), new_profile())

        written = {name for _, name, _ in factory.created[0].writes}
        assert 'SalePrice' not in written
        assert 'Notes' not in written
        assert 'CustomerName' not in written

    def test_checkbox_unchecked_for_no(self):
        factory = create_factory()
        filler = DocumentFiller(create_store(), template_factory=factory)

        filler.generate_document_bytes(get_form_or_raise('interview_sheet'), new_profile())

        assert ('checkbox', 'TradeIn', False) in factory.created[0].writes

    def test_field_failure_does_not_abort(self):
        factory = create_factory(failing=('Phone',))
        filler = DocumentFiller(create_store(), template_factory=factory)

        content = filler.generate_document_bytes(get_form_or_raise('interview_sheet'), create_full_profile())

        template = factory.created[0]
        assert content == b'FILLED:%PDF-interview'
        assert ('text', 'Email', 'jane@example.com') in template.writes
        assert all(name != 'Phone' for _, name, _ in template.writes)
        assert template.flattened

    def test_bad_option_does_not_abort(self):
        factory = create_factory(options={'PurchaseType': ['lease']})
        filler = DocumentFiller(create_store(), template_factory=factory)

        filler.generate_document_bytes(get_form_or_raise('interview_sheet'), create_full_profile())

        assert factory.created[0].flattened

    def test_field_missing_from_template(self):
        kinds = dict(INTERVIEW_KINDS)
        del kinds['Email']
        factory = create_factory(kinds=kinds)
        filler = DocumentFiller(create_store(), template_factory=factory)

        filler.generate_document_bytes(get_form_or_raise('interview_sheet'), create_full_profile())

        assert ('text', 'CustomerName', 'Jane Doe') in factory.created[0].writes

    def test_unsupported_kind_skipped(self):
        kinds = dict(INTERVIEW_KINDS, CustomerName='other')
        factory = create_factory(kinds=kinds)
        filler = DocumentFiller(create_store(), template_factory=factory)

        filler.generate_document_bytes(get_form_or_raise('interview_sheet'), create_full_profile())

        assert all(name != 'CustomerName' for _, name, _ in factory.created[0].writes)

    def test_missing_template_raises(self):
        filler = DocumentFiller(create_store(), template_factory=create_factory())
        form = get_form_or_raise('privacy_policy')

        with pytest.raises(TemplateNotFoundError) as exc_info:
            filler.generate_document_bytes(form, create_full_profile())

        assert 'Privacy Policy' in str(exc_info.value)
        assert exc_info.value.form_id == 'privacy_policy'

    def test_unreadable_template_names_form(self):
        def broken_factory(raw):
            raise TemplateReadError("Not a readable PDF")

        filler = DocumentFiller(create_store(), template_factory=broken_factory)

        with pytest.raises(TemplateReadError) as exc_info:
            filler.generate_document_bytes(get_form_or_raise('interview_sheet'), create_full_profile())

        assert 'Interview Sheet' in str(exc_info.value)
        assert exc_info.value.form_id == 'interview_sheet'


# =============================================================================
# BATCH
# =============================================================================

class TestBatchGeneration:
    """Test sequential multi-form generation."""

    def test_documents_in_order_with_progress(self):
        store = create_store(interview_sheet=b'A', test_drive_agreement=b'B')
        filler = DocumentFiller(store, template_factory=create_factory())
        forms = [get_form_or_raise('interview_sheet'), get_form_or_raise('test_drive_agreement')]
        labels = []

        documents = generate_documents(filler, forms, create_full_profile(), on_progress=labels.append)

        assert [d.filename for d in documents] == ['Interview_Sheet.pdf', 'Test_Drive_Agreement.pdf']
        assert [d.content for d in documents] == [b'FILLED:A', b'FILLED:B']
        assert labels == [
            'Generating 1/2: Interview Sheet...',
            'Generating 2/2: Test Drive Agreement...',
        ]

    def test_error_aborts_remaining_forms(self):
        factory = create_factory()
        store = create_store(interview_sheet=b'A', privacy_policy=b'C')
        filler = DocumentFiller(store, template_factory=factory)
        forms = [
            get_form_or_raise('interview_sheet'),
            get_form_or_raise('test_drive_agreement'),
            get_form_or_raise('privacy_policy'),
        ]
        labels = []

        with pytest.raises(TemplateNotFoundError):
            generate_documents(filler, forms, create_full_profile(), on_progress=labels.append)

        assert len(factory.created) == 1
        assert labels[-1] == 'Generating 2/3: Test Drive Agreement...'

    def test_profile_not_modified(self):
        filler = DocumentFiller(create_store(), template_factory=create_factory())
        profile = create_full_profile()
        before = create_full_profile()

        generate_documents(filler, [get_form_or_raise('interview_sheet')], profile)

        assert profile == before

    def test_deal_package_defaults_to_required_forms(self):
        profile = create_mock_profile(personal_info={'full_name': 'Jane Doe'})
        store = create_store(interview_sheet=b'A', test_drive_agreement=b'B')
        filler = DocumentFiller(store, template_factory=create_factory())
        labels = []

        package = generate_deal_package(filler, profile, on_progress=labels.append)

        assert package.filename == 'Jane_Doe_Deal_Documents.zip'
        assert package.documents == ('Interview_Sheet.pdf', 'Test_Drive_Agreement.pdf')
        assert labels[-1] == PACKAGING_LABEL

        with zipfile.ZipFile(io.BytesIO(package.content)) as archive:
            assert archive.namelist() == ['Interview_Sheet.pdf', 'Test_Drive_Agreement.pdf']
            assert archive.read('Test_Drive_Agreement.pdf') == b'FILLED:B'

    def test_deal_package_explicit_forms(self):
        store = create_store(privacy_policy=b'P')
        filler = DocumentFiller(store, template_factory=create_factory())

        package = generate_deal_package(filler, new_profile(), forms=[get_form_or_raise('privacy_policy')])

        assert package.filename == 'Customer_Deal_Documents.zip'
        assert package.documents == ('Privacy_Policy.pdf',)

    def test_deal_package_aborts_without_archive(self):
        filler = DocumentFiller(create_store(), template_factory=create_factory())
        labels = []

        with pytest.raises(TemplateNotFoundError):
            generate_deal_package(filler, new_profile(), on_progress=labels.append)

        assert PACKAGING_LABEL not in labels


# =============================================================================
# PACKAGING
# =============================================================================

class TestPackaging:
    """Test archive and document naming."""

    def test_document_filename(self):
        assert document_filename('Oil Changes Form') == 'Oil_Changes_Form.pdf'
        assert document_filename('Credit Application (F&I)') == 'Credit_Application_(F&I).pdf'

    def test_archive_filename(self):
        assert archive_filename(create_full_profile()) == 'Jane_Doe_Deal_Documents.zip'
        assert archive_filename(new_profile()) == 'Customer_Deal_Documents.zip'
        assert archive_filename({}) == 'Customer_Deal_Documents.zip'

    def test_build_archive(self):
        content = build_archive([('b.pdf', b'2'), ('a.pdf', b'1')])
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            assert archive.namelist() == ['b.pdf', 'a.pdf']
            assert archive.read('a.pdf') == b'1'

    def test_empty_archive(self):
        content = build_archive([])
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            assert archive.namelist() == []
