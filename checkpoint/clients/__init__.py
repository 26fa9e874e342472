# =======================================================================================
# checkpoint/clients/__init__.py - Remote Clients Package
# =======================================================================================
from .api_client import ApiClient, AuthTokens, ApiErrorInfo, describe_api_error

__all__ = ["ApiClient", "AuthTokens", "ApiErrorInfo", "describe_api_error"]
