"""Service layer exceptions mapped to HTTP errors by the API"""


class DomainValidationError(Exception):
    """Domain validation error for service layer"""
    def __init__(self, message: str, code: str = "VALIDATION_FAILED"):
        self.message = message
        self.code = code
        super().__init__(message)


class DependencyError(Exception):
    """Dependency error for store or external service failures"""
    def __init__(self, message: str, code: str = "DEPENDENCY_UNAVAILABLE"):
        self.message = message
        self.code = code
        super().__init__(message)
