"""
Paperwork Type Definitions

Dataclasses for the document catalog and the derived values computed
from a customer profile. Catalog entries are immutable; readiness,
requirement and fill results are recomputed on every read.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple


class FormStage(Enum):
    """Sales stages plus the two catalog-only tags."""
    INITIAL_CONTACT = "initial_contact"
    FINANCING = "financing"
    CLOSING = "closing"
    ALWAYS = "always"
    CONDITIONAL = "conditional"

    @property
    def label(self) -> str:
        """Human readable stage name (e.g. 'initial contact')."""
        return self.value.replace('_', ' ', 1)


@dataclass(frozen=True)
class Form:
    """
    A paper document tracked by the dealership.

    Attributes:
        id: Stable identifier (snake_case), unique across the catalog
        name: Display name, also used for generated file names
        stage: Stage tag deciding when the document is required
    """
    id: str
    name: str
    stage: FormStage

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'stage': self.stage.value}


@dataclass(frozen=True)
class RequiredForm:
    """A form the current deal needs, with the rule that required it."""
    form: Form
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {'form': self.form.to_dict(), 'reason': self.reason}


@dataclass
class FormReadiness:
    """Whether a form has enough data to be auto-filled."""
    is_ready: bool
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'is_ready': self.is_ready, 'warnings': list(self.warnings)}


@dataclass(frozen=True)
class FilledField:
    """
    A template field with its formatted display value.

    Attributes:
        pdf_field: Field name as discovered on the template
        value: Formatted value ('---' when unknown)
        source_path: Mapped path or special key, 'Not Mapped' or 'N/A'
    """
    pdf_field: str
    value: str
    source_path: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'pdf_field': self.pdf_field,
            'value': self.value,
            'source_path': self.source_path
        }


@dataclass(frozen=True)
class GeneratedDocument:
    """Filled and flattened bytes for one form in a batch."""
    form: Form
    filename: str
    content: bytes


@dataclass(frozen=True)
class DealPackage:
    """A downloadable archive of every generated document."""
    filename: str
    content: bytes
    documents: Tuple[str, ...]
