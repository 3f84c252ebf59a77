# -*- coding: utf-8 -*-
"""
Almacén local de ofertas en un fichero JSON

Actualiza o crea cada oferta por su offer_id (idempotente: volver a
sincronizar los mismos datos no duplica ni reescribe nada).
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

_logger = logging.getLogger(__name__)


def offer_to_record(offer: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normaliza una oferta de Mirakl al registro local

    Args:
        offer: Oferta tal como la devuelve OF21

    Returns:
        dict con mirakl_id, sku, price, quantity, state, active,
        mirakl_updated_at y raw_data
    """
    if not isinstance(offer, dict):
        raise ValueError(f"Offer must be an object, got {type(offer).__name__}")

    offer_id = offer.get('offer_id')
    if offer_id in (None, ''):
        raise ValueError(f"Offer without offer_id: {offer!r}")

    return {
        'mirakl_id': str(offer_id),
        'sku': offer.get('shop_sku') or offer.get('product_sku') or '',
        'price': round(float(offer.get('price') or 0.0), 2),
        'quantity': int(offer.get('quantity') or 0),
        'state': str(offer.get('state_code') or ''),
        'active': bool(offer.get('active', True)),
        'mirakl_updated_at': offer.get('update_date'),
        'raw_data': offer,
    }


class JsonOfferStore:
    """Ofertas persistidas en un único fichero JSON indexado por mirakl_id"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.records: Dict[str, Dict[str, Any]] = {}
        if self.path.exists():
            with self.path.open('r', encoding='utf-8') as fh:
                records = json.load(fh)
            if not isinstance(records, dict):
                raise ValueError(f"Offer store {self.path} must contain a JSON object")
            self.records = records
            _logger.info(f"Loaded {len(self.records)} offers from {self.path}")

    def upsert(self, offer: Dict[str, Any]) -> str:
        """
        Crea o actualiza una oferta

        Returns:
            'created', 'updated' o 'skipped' (sin cambios)
        """
        record = offer_to_record(offer)
        existing = self.records.get(record['mirakl_id'])

        if existing is None:
            self.records[record['mirakl_id']] = record
            return 'created'

        if existing == record:
            return 'skipped'

        self.records[record['mirakl_id']] = record
        return 'updated'

    def save(self):
        """Escribe el fichero de forma atómica"""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with tmp_path.open('w', encoding='utf-8') as fh:
            json.dump(self.records, fh, indent=2, sort_keys=True)
        os.replace(tmp_path, self.path)
        _logger.info(f"Saved {len(self.records)} offers to {self.path}")

    def get(self, mirakl_id: str) -> Optional[Dict[str, Any]]:
        return self.records.get(str(mirakl_id))

    def active(self) -> List[Dict[str, Any]]:
        return [r for r in self.records.values() if r['active']]

    def by_state(self, state: str) -> List[Dict[str, Any]]:
        return [r for r in self.records.values() if r['state'] == state]

    def by_sku(self, sku: str) -> List[Dict[str, Any]]:
        return [r for r in self.records.values() if r['sku'] == sku]

    def low_stock(self, threshold: int = 5) -> List[Dict[str, Any]]:
        """Ofertas activas con cantidad <= threshold"""
        return [
            r for r in self.records.values()
            if r['active'] and r['quantity'] <= threshold
        ]

    def __len__(self):
        return len(self.records)
