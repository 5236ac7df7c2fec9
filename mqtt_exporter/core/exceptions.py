from typing import Optional


class BridgeError(Exception):
    def __init__(self, message: str = "", error_type: Optional[str] = None):
        self.message = message
        self.error_type = error_type
        super().__init__(self.__str__())

    def __str__(self) -> str:
        if self.error_type is not None:
            return f"[{self.error_type}] {self.message}"
        return self.message


class DuplicateInstrumentError(BridgeError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Instrument {name!r} is already registered", "Duplicate instrument")


class InvalidConfigError(BridgeError):
    def __init__(self, message: str = ""):
        super().__init__(message, "Invalid config")
