"""
Client module for the Comax e-commerce SOAP web services
(orders, payment tokens, customers)
"""
from .config import ComaxConfig, get_comax_config
from .exceptions import (
    ComaxClientError,
    ComaxConfigError,
    ComaxParseError,
    ComaxTransportError,
    ComaxValidationError,
    ComaxVendorError,
)
from .models import OperationResult
from .soap_client import ComaxSoapClient

__all__ = [
    'ComaxConfig',
    'get_comax_config',
    'ComaxClientError',
    'ComaxConfigError',
    'ComaxParseError',
    'ComaxTransportError',
    'ComaxValidationError',
    'ComaxVendorError',
    'OperationResult',
    'ComaxSoapClient',
]
