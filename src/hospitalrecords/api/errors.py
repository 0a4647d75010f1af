class APIError(Exception):
    def __init__(self, code: str, message: str, http_status: int = 400, details: dict = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details


class UnauthorizedError(APIError):
    def __init__(self, message: str = "Authentication required", details: dict = None):
        super().__init__("UNAUTHORIZED", message, 401, details)
