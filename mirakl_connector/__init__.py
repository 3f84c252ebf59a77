# -*- coding: utf-8 -*-
"""
Conector para la API de tienda de Mirakl

Cliente de transporte, recorrido paginado con reintentos ante rate
limiting y sincronización de ofertas.
"""

from .api_requests import (
    ApiRequest,
    GetAccountRequest,
    GetOfferRequest,
    GetOffersRequest,
    GetOrdersRequest,
    GetProductsRequest,
    Paginatable,
    ProductReference,
)
from .client import MiraklClient
from .config import MiraklConfig
from .exceptions import (
    ConfigurationError,
    DecodeError,
    MiraklConnectionError,
    MiraklError,
    RetryExhausted,
    TransportError,
)
from .helper import MiraklHelper, decode_page, safe_json_decode
from .models import ApiResponse, PageResult
from .offer_store import JsonOfferStore
from .offer_sync import OfferSynchronizer

__version__ = '1.0.0'
