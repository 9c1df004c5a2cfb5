class RegistryError(Exception):
    """Base class for every error the registries report to a caller."""

    status_code = 400

    def __init__(self, detail="Request could not be processed"):
        super().__init__(detail)
        self.detail = detail


class ValidationError(RegistryError):
    status_code = 400


class NotFoundError(RegistryError):
    status_code = 404


class AuthorizationError(RegistryError):
    status_code = 403

    def __init__(self):
        # The reason for a denial is never exposed
        super().__init__("Not permitted")


class ConflictError(RegistryError):
    status_code = 409


class InvalidTransitionError(RegistryError):
    status_code = 400
