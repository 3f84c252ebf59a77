# -*- coding: utf-8 -*-
"""
Réplica local de las ofertas de Mirakl
"""

from odoo import models, fields, api
from datetime import datetime, timedelta, timezone
import json
import logging

from mirakl_connector.offer_store import offer_to_record

_logger = logging.getLogger(__name__)


class MiraklOffer(models.Model):
    """
    Oferta de Mirakl almacenada en Odoo

    Se actualiza o crea por mirakl_id en cada sincronización.
    """
    _name = 'mirakl.offer'
    _description = 'Mirakl Offer'
    _order = 'mirakl_updated_at desc, id desc'
    _rec_name = 'sku'

    mirakl_id = fields.Char(
        string='Mirakl ID',
        required=True,
        index=True,
        copy=False,
        readonly=True,
    )

    sku = fields.Char(
        string='SKU',
        index=True,
    )

    price = fields.Float(
        string='Price',
        digits=(10, 2),
    )

    quantity = fields.Integer(
        string='Quantity',
        default=0,
    )

    state = fields.Char(
        string='State Code',
        index=True,
    )

    # Campo 'active' de Odoo: las ofertas inactivas quedan archivadas
    active = fields.Boolean(
        string='Active',
        default=True,
        index=True,
    )

    raw_data = fields.Text(
        string='Raw Data',
        help='Oferta original devuelta por Mirakl (JSON)',
    )

    mirakl_updated_at = fields.Datetime(
        string='Updated in Mirakl',
        readonly=True,
    )

    _sql_constraints = [
        (
            'mirakl_id_unique',
            'UNIQUE(mirakl_id)',
            'El Mirakl ID debe ser único.'
        ),
    ]

    @api.model
    def _parse_mirakl_date(self, value):
        """Convierte una fecha ISO-8601 de Mirakl a Datetime de Odoo (naive UTC)"""
        if not value:
            return False
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            _logger.warning(f"Fecha de Mirakl no válida: {value}")
            return False
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed.replace(microsecond=0)

    @api.model
    def _prepare_values_from_mirakl(self, offer):
        record = offer_to_record(offer)
        return {
            'mirakl_id': record['mirakl_id'],
            'sku': record['sku'] or False,
            'price': record['price'],
            'quantity': record['quantity'],
            'state': record['state'] or False,
            'active': record['active'],
            'mirakl_updated_at': self._parse_mirakl_date(record['mirakl_updated_at']),
            'raw_data': json.dumps(offer, indent=2, default=str),
        }

    @api.model
    def create_from_mirakl(self, offer):
        """
        Actualiza o crea una oferta desde datos de Mirakl

        Args:
            offer (dict): Oferta tal como la devuelve Mirakl

        Returns:
            tuple: (mirakl.offer, 'created' | 'updated' | 'skipped')
        """
        values = self._prepare_values_from_mirakl(offer)

        existing = self.with_context(active_test=False).search(
            [('mirakl_id', '=', values['mirakl_id'])], limit=1
        )

        if not existing:
            return self.create(values), 'created'

        changed = {
            name: value for name, value in values.items()
            if existing[name] != value
        }
        if not changed:
            return existing, 'skipped'

        existing.write(changed)
        return existing, 'updated'

    # ========== Métodos de Búsqueda ==========
    @api.model
    def search_by_state(self, state):
        return self.search([('state', '=', state)])

    @api.model
    def search_by_sku(self, sku):
        return self.search([('sku', '=', sku)])

    @api.model
    def search_low_stock(self, threshold=5):
        """Ofertas activas con cantidad menor o igual al umbral"""
        return self.search([('quantity', '<=', threshold)])

    @api.model
    def search_recently_updated(self, hours=24):
        """Ofertas modificadas en Mirakl en las últimas N horas"""
        since = fields.Datetime.now() - timedelta(hours=hours)
        return self.search([('mirakl_updated_at', '>=', since)])
