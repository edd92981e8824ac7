class InitError(Exception):
    """Raised when a verifier cannot be constructed."""
    pass


class FetchFailedError(InitError):
    """Raised when the key set could not be fetched or parsed."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class HeaderDecodeError(Exception):
    """Raised by a TokenDecoder when the token header is unusable."""
    pass


class ClaimsDecodeError(Exception):
    """Raised by a TokenDecoder when signature or payload verification fails."""
    pass
