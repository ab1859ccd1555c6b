"""Order compiler exceptions."""


class OrderCompilerError(Exception):
    """Base error raised by the order compiler services."""


class RestaurantNotFoundError(OrderCompilerError):
    """No approved restaurant exists for the given guid."""


class InvalidRestaurantConfigError(OrderCompilerError):
    """Restaurant fee configuration cannot be parsed."""


class NoCandidatesError(OrderCompilerError):
    """Nothing in scope matched the guest's request."""


class UnparseableRequestError(OrderCompilerError):
    """No orderable item lines could be read from the message."""


class ArtifactStatusError(OrderCompilerError):
    """Raised when freezing a compilation that is not ready to execute."""
