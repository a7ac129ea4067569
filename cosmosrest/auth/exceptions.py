"""
Authentication exceptions for cosmosrest.
"""


class AuthenticationError(Exception):
    """Base exception for credential errors."""

    def __init__(self, message: str, error_code: str = "AuthenticationFailed"):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class InvalidMasterKeyError(AuthenticationError):
    """Raised when a master key cannot be decoded."""

    def __init__(self, message: str = "Master key is not valid base64"):
        super().__init__(message, "InvalidMasterKey")


class InvalidConnectionStringError(AuthenticationError):
    """Raised when a connection string is malformed or incomplete."""

    def __init__(self, message: str = "Invalid connection string"):
        super().__init__(message, "InvalidConnectionString")
