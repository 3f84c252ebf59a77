# -*- coding: utf-8 -*-
"""
Extensión del modelo product.template para productos procedentes de Mirakl
"""

from odoo import models, fields, api
import logging

_logger = logging.getLogger(__name__)


class ProductTemplate(models.Model):
    """
    Extiende product.template con el vínculo a la oferta de Mirakl
    """
    _inherit = 'product.template'

    mirakl_offer_id = fields.Char(
        string='Mirakl Offer ID',
        help='ID de la oferta en Mirakl',
        index=True,
        copy=False,
        readonly=True,
    )

    mirakl_state = fields.Char(
        string='Mirakl State',
        help='Código de estado de la oferta en Mirakl',
        copy=False,
        readonly=True,
    )

    mirakl_updated_at = fields.Datetime(
        string='Updated in Mirakl',
        copy=False,
        readonly=True,
    )

    mirakl_last_sync = fields.Datetime(
        string='Last Mirakl Sync',
        copy=False,
        readonly=True,
    )

    # ========== Métodos de Búsqueda ==========
    @api.model
    def search_by_sku(self, sku):
        """
        Busca un producto por su SKU (default_code en Odoo)

        Args:
            sku (str): SKU a buscar

        Returns:
            product.template: Producto encontrado o recordset vacío
        """
        return self.with_context(active_test=False).search(
            [('default_code', '=', sku)], limit=1
        )

    # ========== Métodos de Sincronización ==========
    @api.model
    def _prepare_values_from_mirakl_offer(self, offer):
        """
        Transforma una oferta de Mirakl en valores de producto de Odoo

        Args:
            offer (dict): Oferta de Mirakl. Claves usadas:
                offer_id, shop_sku / product_sku, product_title, price,
                origin_price, active, description, state_code, update_date

        Returns:
            dict: Valores para create/write
        """
        sku = offer.get('shop_sku') or offer.get('product_sku')
        if not sku:
            raise ValueError(f"Mirakl offer {offer.get('offer_id')} has no SKU")

        price = float(offer.get('price') or 0.0)
        cost = offer.get('origin_price')

        values = {
            'name': offer.get('product_title') or sku,
            'default_code': sku,
            'list_price': price,
            'standard_price': float(cost) if cost is not None else price,
            'type': 'product',
            'active': bool(offer.get('active', True)),
            'description_sale': offer.get('description') or False,
            'mirakl_offer_id': str(offer.get('offer_id', '')) or False,
            'mirakl_state': str(offer.get('state_code') or '') or False,
            'mirakl_updated_at': self.env['mirakl.offer']._parse_mirakl_date(offer.get('update_date')),
        }

        return values

    @api.model
    def create_from_mirakl_offer(self, offer):
        """
        Crea un producto nuevo desde una oferta de Mirakl

        Returns:
            product.template: Producto creado
        """
        values = self._prepare_values_from_mirakl_offer(offer)
        values['mirakl_last_sync'] = fields.Datetime.now()

        product = self.create(values)

        _logger.info(
            f"Producto creado desde Mirakl: {product.name} "
            f"(oferta {product.mirakl_offer_id})"
        )

        return product

    def update_from_mirakl_offer(self, offer):
        """
        Actualiza el producto con los datos de la oferta

        Args:
            offer (dict): Oferta de Mirakl

        Returns:
            bool: True si se actualizó, False si no hubo cambios
        """
        self.ensure_one()
        values = self._prepare_values_from_mirakl_offer(offer)

        changed = {
            name: value for name, value in values.items()
            if self[name] != value
        }

        if not changed:
            _logger.debug(f"Producto {self.name} sin cambios, omitiendo actualización")
            return False

        changed['mirakl_last_sync'] = fields.Datetime.now()
        self.write(changed)
        _logger.info(f"Producto {self.name} actualizado desde Mirakl ({', '.join(sorted(changed))})")
        return True
