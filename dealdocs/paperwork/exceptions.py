"""
Paperwork System Exceptions

Custom exceptions for deal document configuration and generation errors.
"""


class DocumentError(Exception):
    """Base exception for all paperwork system errors."""
    pass


class ConfigurationError(DocumentError):
    """
    Raised when paperwork configuration is invalid.

    This includes unreadable mapping files and an unknown
    template storage backend.
    """
    pass


class UnknownFormError(DocumentError):
    """Raised when a form id is not part of the document catalog."""
    def __init__(self, message: str, form_id: str = None):
        self.form_id = form_id
        super().__init__(message)


class TemplateNotFoundError(DocumentError):
    """
    Raised when no template file has been uploaded for a form.

    Generation of that document cannot proceed.
    """
    def __init__(self, message: str, form_id: str = None):
        self.form_id = form_id
        super().__init__(message)


class TemplateReadError(DocumentError):
    """
    Raised when template bytes exist but cannot be parsed as a PDF form.
    """
    def __init__(self, message: str, form_id: str = None):
        self.form_id = form_id
        super().__init__(message)


class FieldWriteError(DocumentError):
    """
    Raised when a single value cannot be written into a template field.

    The filler catches these per field; they never abort a document.
    """
    def __init__(self, message: str, field_name: str = None):
        self.field_name = field_name
        super().__init__(message)


class ExtractionError(DocumentError):
    """
    Raised when AI extraction of customer data fails.

    Wraps the underlying API or parsing error.
    """
    def __init__(self, message: str, source: str = None):
        self.source = source
        super().__init__(message)
