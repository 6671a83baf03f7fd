"""Error taxonomy for worksheet export."""


class ExportError(Exception):
    """Base class for every failure raised by the export pipeline."""

    pass


class InvalidExportInputError(ExportError):
    """Export options or worksheet are unusable. Raised before any fetch happens."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("Invalid export input: " + "; ".join(problems))


class ImageFetchError(ExportError):
    """A single question image could not be retrieved or decoded."""

    def __init__(self, url: str, cause: BaseException):
        self.url = url
        self.cause = cause
        super().__init__(f"Could not fetch image {url}: {cause}")


class SerializationError(ExportError):
    """The assembled blocks could not be written as a .docx file."""

    pass


class DeliveryError(ExportError):
    """The finished document could not be handed to the client."""

    pass
