# -*- coding: utf-8 -*-
"""
Recorrido paginado con reintentos ante rate limiting (HTTP 429)

Flujo de fetch_all_paginated:
1. Asignar max/offset a la petición (solo si es Paginatable)
2. Ejecutar con reintentos
3. Decodificar la página (offers / products / orders / data)
4. Notificar la página al callback y acumular
5. Terminar con página vacía o cuando se alcanza total_count

Limitación conocida: una página vacía a mitad del recorrido (por ejemplo
una respuesta vacía transitoria) termina el bucle y trunca el resultado.
"""

import json
import time
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from .api_requests import (
    ApiRequest,
    GetOffersRequest,
    GetOrdersRequest,
    GetProductsRequest,
    Paginatable,
)
from .client import MiraklClient
from .exceptions import DecodeError, RetryExhausted, TransportError
from .models import ApiResponse, PageResult

_logger = logging.getLogger(__name__)

DEFAULT_MAX_PER_PAGE = 100
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_AFTER = 60
RATE_LIMIT_STATUS = 429

# La API no garantiza un sobre uniforme: se prueban estas claves en orden
ITEM_KEYS = ('offers', 'products', 'orders', 'data')

PageCallback = Callable[[List[Dict[str, Any]], int], None]


def decode_json(body: bytes) -> Any:
    """
    Decodifica un cuerpo JSON

    Raises:
        DecodeError: Si el cuerpo no es JSON válido
    """
    try:
        return json.loads(body)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Invalid JSON body: {e}") from e


def safe_json_decode(body: bytes) -> Optional[Any]:
    """
    Decodifica JSON sin lanzar excepciones

    Returns:
        Datos decodificados o None si el cuerpo es inválido (se registra el error)
    """
    try:
        return decode_json(body)
    except DecodeError as e:
        _logger.error(f"JSON decode error: {e} (body: {body[:200]!r})")
        return None


def decode_page(response: ApiResponse) -> Optional[PageResult]:
    """
    Convierte una respuesta en PageResult

    Args:
        response: Respuesta exitosa de la API

    Returns:
        PageResult, o None si el cuerpo no se pudo decodificar
    """
    data = safe_json_decode(response.body)
    if data is None:
        return None

    items: List[Dict[str, Any]] = []
    if isinstance(data, dict):
        for key in ITEM_KEYS:
            if data.get(key) is not None:
                value = data[key]
                if isinstance(value, list):
                    items = value
                else:
                    _logger.warning(f"Unexpected type for '{key}' in response: {type(value).__name__}")
                break

    total_count = len(items)
    if isinstance(data, dict) and data.get('total_count') is not None:
        try:
            total_count = int(data['total_count'])
        except (TypeError, ValueError):
            _logger.warning(f"Ignoring non-numeric total_count: {data['total_count']!r}")

    return PageResult(items=items, total_count=total_count)


def parse_retry_after(value: Optional[str], default: int = DEFAULT_RETRY_AFTER) -> int:
    """
    Interpreta la cabecera Retry-After (segundos enteros)

    Returns:
        Segundos a esperar; default si falta, es inválida o negativa
    """
    if value is None:
        return default
    try:
        seconds = int(str(value).strip())
    except ValueError:
        return default
    return seconds if seconds >= 0 else default


class MiraklHelper:
    """
    Recorridos paginados y reintentos sobre un MiraklClient

    El cliente se inyecta explícitamente; no hay instancia global.
    """

    def __init__(
        self,
        client: MiraklClient,
        max_retries: int = DEFAULT_MAX_RETRIES,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            client: Cliente de transporte (cualquier objeto con execute())
            max_retries: Intentos máximos por defecto ante 429
            sleep: Función de espera (inyectable para tests)
        """
        self.client = client
        self.max_retries = max_retries
        self._sleep = sleep

    def execute_with_retry(self, request: ApiRequest, max_retries: Optional[int] = None) -> ApiResponse:
        """
        Ejecuta una petición reintentando solo ante HTTP 429

        Cada 429 cuenta como intento. Al llegar a max_retries se relanza el
        último TransportError sin esperar; con max_retries=3 y una API que
        siempre responde 429 se hacen 3 llamadas y 2 esperas.

        Args:
            request: Petición a ejecutar
            max_retries: Intentos máximos (por defecto self.max_retries)

        Returns:
            Respuesta exitosa

        Raises:
            TransportError: Status distinto de 429, o 429 tras agotar intentos
            MiraklConnectionError: Fallo de red (sin reintentos)
            RetryExhausted: Si el bucle termina sin resultado (max_retries <= 0)
        """
        if max_retries is None:
            max_retries = self.max_retries

        attempt = 0
        while attempt < max_retries:
            try:
                return self.client.execute(request)
            except TransportError as e:
                if e.status_code != RATE_LIMIT_STATUS:
                    raise

                attempt += 1
                if attempt >= max_retries:
                    _logger.error(
                        f"Mirakl rate limit persisted after {attempt} attempts, giving up"
                    )
                    raise

                retry_after = parse_retry_after(e.header('Retry-After'))
                _logger.warning(
                    f"Mirakl rate limit hit, waiting {retry_after} seconds "
                    f"(attempt {attempt}/{max_retries})"
                )
                self._sleep(retry_after)

        raise RetryExhausted(f"Max retries exceeded ({max_retries}) for {request!r}")

    def fetch_page(self, request: ApiRequest) -> PageResult:
        """Ejecuta una sola página; un cuerpo inválido se trata como página vacía"""
        response = self.execute_with_retry(request)
        return decode_page(response) or PageResult(items=[], total_count=0)

    def fetch_all_paginated(
        self,
        request: ApiRequest,
        max_per_page: int = DEFAULT_MAX_PER_PAGE,
        callback: Optional[PageCallback] = None,
    ) -> List[Dict[str, Any]]:
        """
        Recorre todas las páginas de una petición y retorna los items

        Args:
            request: Petición plantilla (se modifica in situ si es Paginatable)
            max_per_page: Tamaño de página
            callback: Se invoca con (items, offset) antes de acumular cada
                página; sus excepciones abortan el recorrido

        Returns:
            Items de todas las páginas en orden de llegada
        """
        if max_per_page <= 0:
            raise ValueError(f"max_per_page must be positive, got {max_per_page}")

        paginatable = isinstance(request, Paginatable)
        results: List[Dict[str, Any]] = []
        offset = 0
        pages = 0

        while True:
            if paginatable:
                request.set_page(max_per_page, offset)

            response = self.execute_with_retry(request)
            page = decode_page(response)
            pages += 1

            # Evita bucles infinitos aunque total_count indique más datos
            if page is None or not page.items:
                _logger.debug(f"Empty or undecodable page at offset {offset}, stopping")
                break

            if callback:
                callback(page.items, offset)

            results.extend(page.items)
            offset += max_per_page

            _logger.debug(f"Fetched {len(results)}/{page.total_count} items from {request.endpoint}")

            if not paginatable or len(results) >= page.total_count:
                break

        _logger.info(f"Fetched {len(results)} items from {request.endpoint} in {pages} page(s)")
        return results

    def get_all_offers(
        self,
        max_per_page: int = DEFAULT_MAX_PER_PAGE,
        sku: Optional[str] = None,
        state: Optional[str] = None,
        updated_since: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        request = GetOffersRequest(sku=sku, state=state, updated_since=updated_since)
        return self.fetch_all_paginated(request, max_per_page)

    def get_all_products(
        self,
        product_references: Iterable,
        max_per_page: int = DEFAULT_MAX_PER_PAGE,
    ) -> List[Dict[str, Any]]:
        request = GetProductsRequest(product_references)
        return self.fetch_all_paginated(request, max_per_page)

    def get_all_orders(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        order_states: Optional[Iterable[str]] = None,
        max_per_page: int = DEFAULT_MAX_PER_PAGE,
    ) -> List[Dict[str, Any]]:
        request = GetOrdersRequest(start_date=start_date, end_date=end_date, order_states=order_states)
        return self.fetch_all_paginated(request, max_per_page)
