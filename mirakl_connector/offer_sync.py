# -*- coding: utf-8 -*-
"""
Sincronización de ofertas de Mirakl hacia un destino arbitrario

El destino se inyecta como un "processor" que recibe cada oferta y
retorna la operación realizada ('created', 'updated' o 'skipped').
Los errores por oferta se aíslan: se cuentan, se registran y el
recorrido continúa.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .api_requests import GetOffersRequest
from .helper import DEFAULT_MAX_PER_PAGE, MiraklHelper

_logger = logging.getLogger(__name__)

EVENT_PREFIX = 'mirakl.sync.offers'
OPERATIONS = ('created', 'updated', 'skipped')

Processor = Callable[[Dict[str, Any]], str]
Notifier = Callable[[str, Dict[str, Any]], None]
ErrorHandler = Callable[[Dict[str, Any], Exception], None]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def offer_identity(offer: Any) -> Tuple[Optional[Any], Optional[str]]:
    """(offer_id, sku) de una oferta; (None, None) si no es un diccionario"""
    if not isinstance(offer, dict):
        return None, None
    return offer.get('offer_id'), offer.get('shop_sku') or offer.get('product_sku')


def _printable_filters(filters: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in filters.items()
    }


class OfferSynchronizer:
    """
    Orquesta la sincronización de ofertas

    Eventos emitidos (prefijo configurable):
    - <prefix>.started   {filters, timestamp}
    - <prefix>.progress  {processed, created, updated, errors, offset}
    - <prefix>.completed {stats, timestamp}
    - <prefix>.failed    {error, stats, timestamp}
    """

    def __init__(
        self,
        helper: MiraklHelper,
        processor: Processor,
        notifier: Optional[Notifier] = None,
        error_handler: Optional[ErrorHandler] = None,
        max_per_page: int = DEFAULT_MAX_PER_PAGE,
        progress_every: int = 100,
        event_prefix: str = EVENT_PREFIX,
    ):
        self.helper = helper
        self.processor = processor
        self.notifier = notifier
        self.error_handler = error_handler
        self.max_per_page = max_per_page
        self.progress_every = progress_every
        self.event_prefix = event_prefix

    def _notify(self, event: str, payload: Dict[str, Any]):
        name = f"{self.event_prefix}.{event}"
        _logger.debug(f"Event {name}: {payload}")
        if self.notifier:
            self.notifier(name, payload)

    def run(self, filters: Optional[Mapping[str, Any]] = None) -> Dict[str, int]:
        """
        Sincroniza todas las ofertas que cumplan los filtros

        Args:
            filters: 'sku', 'state' y/o 'updated_since' (datetime)

        Returns:
            dict: processed, created, updated, skipped, errors
        """
        filters = dict(filters or {})
        stats = {'processed': 0, 'created': 0, 'updated': 0, 'skipped': 0, 'errors': 0}

        _logger.info(f"Starting Mirakl offers synchronization (filters={_printable_filters(filters)})")
        self._notify('started', {
            'filters': _printable_filters(filters),
            'timestamp': _now_iso(),
        })

        def process_page(offers: List[Dict[str, Any]], offset: int):
            for offer in offers:
                self._process_offer(offer, stats, offset)

        try:
            request = GetOffersRequest.from_filters(filters)
            self.helper.fetch_all_paginated(request, self.max_per_page, callback=process_page)
        except Exception as e:
            _logger.error(f"Mirakl offers synchronization failed: {e}", exc_info=True)
            self._notify('failed', {
                'error': str(e),
                'stats': dict(stats),
                'timestamp': _now_iso(),
            })
            raise

        self._notify('completed', {
            'stats': dict(stats),
            'timestamp': _now_iso(),
        })
        _logger.info(
            f"Mirakl offers synchronization completed: processed={stats['processed']} "
            f"created={stats['created']} updated={stats['updated']} "
            f"skipped={stats['skipped']} errors={stats['errors']}"
        )
        return stats

    def _process_offer(self, offer: Dict[str, Any], stats: Dict[str, int], offset: int):
        try:
            operation = self.processor(offer)
            if operation not in OPERATIONS:
                raise ValueError(f"Unknown sync operation {operation!r}")
            stats[operation] += 1
            stats['processed'] += 1
        except Exception as e:
            stats['errors'] += 1
            offer_id, sku = offer_identity(offer)
            _logger.error(f"Error syncing Mirakl offer {offer_id} (sku={sku}): {e}", exc_info=True)
            if self.error_handler:
                self.error_handler(offer, e)
            return

        if self.progress_every and stats['processed'] % self.progress_every == 0:
            self._notify('progress', {
                'processed': stats['processed'],
                'created': stats['created'],
                'updated': stats['updated'],
                'errors': stats['errors'],
                'offset': offset,
            })
