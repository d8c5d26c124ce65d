class InvalidInputError(Exception):
    """Request body cannot be analyzed. Rendered as a 400 with an error message."""


class ModelGatewayError(Exception):
    """The model inference call failed or returned an unusable envelope."""
