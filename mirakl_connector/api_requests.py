# -*- coding: utf-8 -*-
"""
Peticiones soportadas de la API de tienda de Mirakl

Cada petición describe un endpoint, su método HTTP y sus parámetros.
Las que admiten paginación heredan de Paginatable y el bucle de
paginación les asigna max/offset en cada página.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional


def format_date(value: datetime) -> str:
    """
    Formatea una fecha en ISO-8601 UTC, el formato que espera Mirakl

    Las fechas sin zona horaria se asumen en UTC.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime('%Y-%m-%dT%H:%M:%SZ')


class ApiRequest:
    """Petición base: GET sin parámetros"""

    method = 'GET'
    endpoint = ''

    def query_params(self) -> Dict[str, Any]:
        return {}

    def body(self) -> Optional[Dict[str, Any]]:
        return None

    def __repr__(self):
        return f"{type(self).__name__}({self.method} {self.endpoint} {self.query_params()})"


class Paginatable:
    """
    Capacidad de paginación por max/offset

    El bucle de paginación modifica la petición in situ entre páginas,
    por lo que una misma instancia no debe compartirse entre recorridos
    concurrentes.
    """

    max_per_page: Optional[int] = None
    offset: Optional[int] = None

    def set_page(self, max_per_page: int, offset: int):
        self.max_per_page = max_per_page
        self.offset = offset

    def page_params(self) -> Dict[str, int]:
        params = {}
        if self.max_per_page is not None:
            params['max'] = self.max_per_page
        if self.offset is not None:
            params['offset'] = self.offset
        return params


class GetAccountRequest(ApiRequest):
    """A01 - Información de la tienda (útil para probar la conexión)"""

    endpoint = '/account'


class GetOfferRequest(ApiRequest):
    """OF22 - Una oferta por su identificador"""

    def __init__(self, offer_id):
        self.offer_id = offer_id

    @property
    def endpoint(self):
        return f'/offers/{self.offer_id}'


class GetOffersRequest(Paginatable, ApiRequest):
    """OF21 - Listado paginado de ofertas de la tienda"""

    endpoint = '/offers'

    def __init__(
        self,
        sku: Optional[str] = None,
        state: Optional[str] = None,
        updated_since: Optional[datetime] = None,
    ):
        self.sku = sku
        self.state = state
        self.updated_since = updated_since

    @classmethod
    def from_filters(cls, filters: Optional[Mapping[str, Any]] = None) -> 'GetOffersRequest':
        """
        Construye la petición desde un diccionario de filtros

        Args:
            filters: Claves soportadas: 'sku', 'state', 'updated_since'
        """
        filters = filters or {}
        return cls(
            sku=filters.get('sku'),
            state=filters.get('state'),
            updated_since=filters.get('updated_since'),
        )

    def query_params(self) -> Dict[str, Any]:
        params = self.page_params()
        if self.sku:
            params['sku'] = self.sku
        if self.state:
            params['offer_state_codes'] = self.state
        if self.updated_since:
            params['updated_since'] = format_date(self.updated_since)
        return params


class GetOrdersRequest(Paginatable, ApiRequest):
    """OR11 - Listado paginado de pedidos"""

    endpoint = '/orders'

    def __init__(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        order_states: Optional[Iterable[str]] = None,
    ):
        self.start_date = start_date
        self.end_date = end_date
        self.order_states = list(order_states or [])

    def query_params(self) -> Dict[str, Any]:
        params = self.page_params()
        if self.start_date:
            params['start_date'] = format_date(self.start_date)
        if self.end_date:
            params['end_date'] = format_date(self.end_date)
        if self.order_states:
            params['order_state_codes'] = ','.join(self.order_states)
        return params


class ProductReference:
    """Referencia de producto (tipo + valor), ej: EAN 1234567890123"""

    def __init__(self, reference_type: str, reference: str):
        self.reference_type = reference_type
        self.reference = reference

    def __str__(self):
        return f'{self.reference_type}|{self.reference}'


class GetProductsRequest(ApiRequest):
    """
    P31 - Productos por referencia

    No es paginable: se envía una sola vez.
    """

    endpoint = '/products'

    def __init__(self, product_references: Optional[Iterable] = None):
        references: List[ProductReference] = []
        for ref in product_references or []:
            if isinstance(ref, ProductReference):
                references.append(ref)
            else:
                references.append(ProductReference(ref['type'], ref['reference']))
        self.product_references = references

    def query_params(self) -> Dict[str, Any]:
        if not self.product_references:
            return {}
        return {
            'product_references': ','.join(str(ref) for ref in self.product_references),
        }
