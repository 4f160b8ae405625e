from __future__ import annotations


class ExtractionError(Exception):
    """A fiscal XML document could not be turned into a record."""


class InvalidXmlError(ExtractionError):
    """The input is not well-formed XML."""

    def __init__(self, message: str = "Arquivo XML inválido ou corrompido.") -> None:
        super().__init__(message)


class UnrecognizedFormatError(ExtractionError):
    """Well-formed XML that matches neither CT-e nor NFS-e, or carries no positive value."""

    def __init__(
        self,
        message: str = "Formato de XML não reconhecido (não é CT-e nem NFS-e padrão).",
        attempted: tuple[str, ...] = (),
    ) -> None:
        super().__init__(message)
        self.attempted = attempted
