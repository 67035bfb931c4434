class PyAlfenException(Exception):
    pass


class InvalidConfigurationParameter(PyAlfenException, ValueError):
    pass


class AlfenTransportError(PyAlfenException):
    """Network, timeout or connection failure talking to the charger"""
    pass


class AuthenticationError(PyAlfenException):
    """Login to the charger failed"""
    pass


class UnauthorizedRetryExhausted(PyAlfenException):
    """Charger still answered 401 after a fresh login and one retry"""
    pass


class AlfenApiError(PyAlfenException):
    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class PropertyNotFound(PyAlfenException, KeyError):
    def __init__(self, property_id: str, snapshot=None):
        super().__init__(f"unable to get property {property_id} from {snapshot!r}")
        self.property_id = property_id
        self.snapshot = snapshot

    def __str__(self):
        return self.args[0]


class PropertyTypeError(PyAlfenException, TypeError):
    pass


class UnhandledStatusCode(PyAlfenException):
    def __init__(self, code):
        super().__init__(f"unhandled status: {code}")
        self.code = code
