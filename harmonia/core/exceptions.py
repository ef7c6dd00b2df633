class HarmoniaError(Exception):
    """Base error for the resonance engine."""


class InvalidColorError(HarmoniaError, ValueError):
    """Raised by strict color parsing when a value is not a hex color."""

    def __init__(self, value: object):
        super().__init__(f"Not a hex color: {value!r}")
        self.value = value
