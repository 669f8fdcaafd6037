"""Exception hierarchy for the field-layout engine."""


class FormLayerError(Exception):
    """Base class for every error raised by formlayer."""


class DocumentLoadError(FormLayerError):
    """The input bytes are not a readable PDF document."""


class FieldReadError(FormLayerError):
    """A single form field's geometry or type could not be read."""

    def __init__(self, field_name, reason):
        super().__init__(f"field '{field_name}': {reason}")
        self.field_name = field_name
        self.reason = reason


class ValueRecordParseError(FormLayerError):
    """The textual value record is not a well-formed JSON object."""


class GenerationError(FormLayerError):
    """Drawing a field, or writing the final document, failed."""


class ImageAttachmentError(FormLayerError):
    """Attachment bytes are not an image, or the target is not an image field."""


class OperationInProgress(FormLayerError):
    """A generation or page-caching pass is already running for this session."""
