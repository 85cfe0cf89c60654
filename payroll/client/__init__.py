"""Client-side session handling for the payroll API."""
from payroll.client.api import ApiClient, error_message, is_auth_url
from payroll.client.singleflight import SingleFlight
from payroll.client.storage import FileStorage, KeyValueStorage, MemoryStorage
from payroll.client.tokens import TokenStore

__all__ = [
    "ApiClient",
    "error_message",
    "is_auth_url",
    "SingleFlight",
    "FileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "TokenStore",
]
