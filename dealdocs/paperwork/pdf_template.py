"""
PDF Form Template

A thin wrapper over a pypdf writer exposing just what the filler needs:
field discovery, three write modes (text, checkbox, single select) and
flattening.

Usage:
    template = PdfFormTemplate(raw_bytes)
    template.set_text('CustomerName', 'Jane Doe')
    template.set_checked('TradeIn', True)
    template.flatten()
    filled = template.to_bytes()
"""

import io
import logging
from typing import Any, Dict, List

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from pypdf.generic import DictionaryObject, NameObject, StreamObject

from .exceptions import FieldWriteError, TemplateReadError

logger = logging.getLogger(__name__)

# Field flags (PDF 32000-1, table 226)
FLAG_RADIO = 1 << 15
FLAG_PUSHBUTTON = 1 << 16

# Field kinds reported by get_field_kind
KIND_TEXT = 'text'
KIND_CHECKBOX = 'checkbox'
KIND_RADIO = 'radio'
KIND_SELECT = 'select'
KIND_OTHER = 'other'

OFF_STATE = '/Off'


def _read_pdf(raw: bytes) -> PdfReader:
    if not raw:
        raise TemplateReadError("Template file is empty")
    try:
        return PdfReader(io.BytesIO(raw))
    except (PyPdfError, ValueError) as e:
        raise TemplateReadError(f"Not a readable PDF: {e}")


def _terminal_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Drop parent nodes of hierarchical fields, keeping fillable leaves."""
    terminal = {}
    for name, field in fields.items():
        kids = field.get('/Kids') or []
        if any('/T' in kid.get_object() for kid in kids):
            continue
        terminal[name] = field
    return terminal


def _widget_field_name(widget: Any) -> str:
    """Fully qualified name of the field a widget belongs to."""
    parts = []
    node = widget if '/T' in widget else widget.get('/Parent')
    while node is not None:
        node = node.get_object()
        if '/T' in node:
            parts.append(str(node['/T']))
        node = node.get('/Parent')
    return '.'.join(reversed(parts))


def _current_appearance(widget: Any) -> Any:
    """The normal appearance stream a widget shows right now, if any."""
    appearances = widget.get('/AP')
    if appearances is None:
        return None
    normal = appearances.get_object().get('/N')
    if normal is None:
        return None
    normal = normal.get_object()
    if not isinstance(normal, StreamObject):
        # On/off buttons keep one stream per state
        state = widget.get('/AS')
        if state is None or state not in normal:
            return None
        normal = normal[state].get_object()
    return normal if isinstance(normal, StreamObject) else None


def discover_fields(raw: bytes) -> List[str]:
    """
    List the fillable field names on a PDF template.

    Returns an empty list for a PDF with no AcroForm.
    """
    reader = _read_pdf(raw)
    return list(_terminal_fields(reader.get_fields() or {}).keys())


class PdfFormTemplate:
    """
    A PDF AcroForm loaded for filling.

    Written values are remembered so flatten() can burn them into the
    page content. Fields nobody wrote are burned in from the appearance
    the template already carries.
    """

    def __init__(self, raw: bytes):
        reader = _read_pdf(raw)
        try:
            self._fields = _terminal_fields(reader.get_fields() or {})
            self._writer = PdfWriter(clone_from=reader)
        except (PyPdfError, ValueError, KeyError) as e:
            raise TemplateReadError(f"Could not load form fields: {e}")
        self._values: Dict[str, Any] = {}
        self._flattened = False
        if self._fields:
            self._writer.set_need_appearances_writer(True)

    def field_names(self) -> List[str]:
        return list(self._fields.keys())

    def _get_field(self, name: str) -> Any:
        field = self._fields.get(name)
        if field is None:
            raise FieldWriteError(f"No field named '{name}' on template", field_name=name)
        return field

    def get_field_kind(self, name: str) -> str:
        """
        Classify a field as text, checkbox, radio, select or other.

        Raises:
            FieldWriteError: If the template has no such field
        """
        field = self._get_field(name)
        field_type = field.get('/FT')
        flags = int(field.get('/Ff', 0))

        if field_type == '/Tx':
            return KIND_TEXT
        if field_type == '/Btn':
            if flags & FLAG_PUSHBUTTON:
                return KIND_OTHER
            if flags & FLAG_RADIO:
                return KIND_RADIO
            return KIND_CHECKBOX
        if field_type == '/Ch':
            return KIND_SELECT
        return KIND_OTHER

    def _states(self, name: str) -> List[str]:
        return [str(s) for s in self._get_field(name).get('/_States_', [])]

    def _choice_options(self, name: str) -> List[str]:
        """Export values and display labels of a choice field."""
        options = []
        for opt in self._get_field(name).get('/Opt', []):
            opt = opt.get_object() if hasattr(opt, 'get_object') else opt
            if isinstance(opt, list):
                options.extend(str(o) for o in opt)
            else:
                options.append(str(opt))
        return options

    def _update(self, name: str, value: Any) -> None:
        if self._flattened:
            raise FieldWriteError(f"Template already flattened, cannot write '{name}'", field_name=name)
        for page in self._writer.pages:
            if '/Annots' not in page:
                continue
            self._writer.update_page_form_field_values(page, {name: value}, auto_regenerate=None)
        self._values[name] = value

    def set_text(self, name: str, value: str) -> None:
        self._get_field(name)
        self._update(name, value)

    def set_checked(self, name: str, checked: bool) -> None:
        """Check or uncheck a checkbox using its own "on" state name."""
        if not checked:
            self._update(name, NameObject(OFF_STATE))
            return
        on_states = [s for s in self._states(name) if s != OFF_STATE]
        self._update(name, NameObject(on_states[0] if on_states else '/Yes'))

    def select_option(self, name: str, option: str) -> None:
        """
        Select a radio button or choice option by exact value.

        Raises:
            FieldWriteError: If the option is not offered by the field
        """
        if self.get_field_kind(name) == KIND_RADIO:
            state = option if option.startswith('/') else f"/{option}"
            if state not in self._states(name):
                raise FieldWriteError(
                    f"Option '{option}' not available on radio group '{name}'", field_name=name
                )
            self._update(name, NameObject(state))
            return

        options = self._choice_options(name)
        if options and option not in options:
            raise FieldWriteError(
                f"Option '{option}' not available on choice field '{name}'", field_name=name
            )
        self._update(name, option)

    def _draw_widget_appearances(self, page: Any, skip: Dict[str, Any]) -> None:
        """Draw each widget's current appearance stream into the page content."""
        if '/Resources' not in page:
            page[NameObject('/Resources')] = DictionaryObject()
        for index, widget in enumerate(page['/Annots']):
            widget = widget.get_object()
            if widget.get('/Subtype') != '/Widget':
                continue
            name = _widget_field_name(widget)
            if name in skip:
                continue
            appearance = _current_appearance(widget)
            if appearance is None:
                continue
            rect = widget['/Rect']
            self._writer._add_apstream_object(
                page, appearance, f"w{index}_{name}", rect[0], rect[1]
            )

    def flatten(self) -> None:
        """
        Burn every field's appearance into the pages and remove the widgets.

        Written text and choice values get a freshly generated appearance.
        Buttons and fields nobody wrote are drawn from the appearance they
        currently show, so values printed on the template survive. The
        result has no editable fields left.
        """
        generated = {
            name: value for name, value in self._values.items()
            if self.get_field_kind(name) in (KIND_TEXT, KIND_SELECT)
        }
        for page in self._writer.pages:
            if '/Annots' not in page:
                continue
            self._draw_widget_appearances(page, skip=generated)
            if generated:
                self._writer.update_page_form_field_values(
                    page, generated, auto_regenerate=None, flatten=True
                )
        logger.debug(f"Flattened {len(self._fields)} fields ({len(generated)} regenerated)")
        self._writer.remove_annotations(subtypes='/Widget')
        root = self._writer._root_object
        if '/AcroForm' in root:
            del root['/AcroForm']
        self._flattened = True

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self._writer.write(buffer)
        return buffer.getvalue()
