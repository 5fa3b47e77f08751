"""Exceptions raised by the decoder and hash calculator."""


class DecoderError(Exception):
    """Base class for recoverable decode failures."""


class TooShortError(DecoderError, ValueError):
    """Raised when a read would go past the end of the available hex data."""


class MalformedBundleError(TooShortError):
    """Raised when a packed multiSend bundle ends in the middle of an entry."""


class InvalidHexError(DecoderError, ValueError):
    """Raised when data that should be hex contains other characters."""


class MultiSendDecodeError(DecoderError):
    """Raised when data announces multiSend(bytes) but its parameters cannot be parsed."""


class MaxDepthExceededError(DecoderError):
    """Raised when nested multiSend calls go deeper than the configured limit."""


class SignatureLookupError(DecoderError):
    """Raised on signature database transport or response-shape failures."""


class InvalidVersionError(ValueError):
    """Raised when a Safe version string cannot be parsed."""


class TransactionServiceError(Exception):
    """Raised on Safe Transaction Service query failures."""
