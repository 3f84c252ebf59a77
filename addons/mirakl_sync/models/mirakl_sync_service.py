# -*- coding: utf-8 -*-
"""
Servicio de Sincronización con Mirakl
Conecta el recorrido paginado de mirakl_connector con los modelos de Odoo
"""

from odoo import models, api
from odoo.exceptions import UserError
import logging
import time
import uuid

from mirakl_connector import (
    MiraklClient,
    MiraklConfig,
    MiraklError,
    MiraklHelper,
    OfferSynchronizer,
)
from mirakl_connector.offer_sync import offer_identity

_logger = logging.getLogger(__name__)

OPERATION_BY_RESULT = {
    'created': 'create',
    'updated': 'update',
    'skipped': 'skip',
}


class MiraklSyncService(models.AbstractModel):
    """
    Servicio transaccional para sincronización de ofertas de Mirakl

    Responsabilidades:
    - Construir cliente y helper desde los parámetros del sistema
    - Replicar ofertas en mirakl.offer
    - Crear/actualizar productos y stock desde las ofertas
    - Registrar logs estructurados por oferta y por ejecución
    """
    _name = 'mirakl.sync.service'
    _description = 'Mirakl Synchronization Service'

    def _get_param(self, key, default=None):
        return self.env['ir.config_parameter'].sudo().get_param(f'mirakl_sync.{key}', default)

    def _get_int_param(self, key, default):
        """
        Lee un parámetro entero positivo

        Raises:
            UserError: Si el valor no es un entero positivo
        """
        value = self._get_param(key, str(default))
        try:
            number = int(value)
        except (TypeError, ValueError):
            number = 0
        if number <= 0:
            raise UserError(f"Invalid value for mirakl_sync.{key}: {value!r} (positive integer expected)")
        return number

    def _get_mirakl_config(self):
        """
        Lee la configuración de Mirakl desde los parámetros del sistema

        Raises:
            UserError: Si la configuración está incompleta
        """
        try:
            return MiraklConfig(
                api_url=self._get_param('api_url', ''),
                api_key=self._get_param('api_key', ''),
                shop_id=self._get_param('shop_id', ''),
                timeout=int(self._get_param('api_timeout', '30')),
            )
        except (MiraklError, ValueError) as e:
            raise UserError(str(e))

    def _get_mirakl_helper(self):
        """
        Construye el helper con un cliente nuevo

        Returns:
            MiraklHelper: Helper listo para recorrer páginas
        """
        config = self._get_mirakl_config()
        max_retries = self._get_int_param('max_retries', 3)
        return MiraklHelper(MiraklClient(config), max_retries=max_retries)

    def _build_synchronizer(self, helper, processor, sync_batch_id, is_automatic, event_prefix):
        SyncLog = self.env['mirakl.sync.log']

        def notify(event, payload):
            kind = event.rsplit('.', 1)[-1]
            if kind not in ('started', 'completed'):
                # 'failed' se registra tras el rollback, ver _log_failure
                _logger.info(f"{event}: {payload}")
                return
            SyncLog.log_operation(
                operation=kind,
                message=event,
                payload=payload,
                sync_batch_id=sync_batch_id,
                is_automatic=is_automatic,
            )

        def on_error(offer, error):
            offer_id, sku = offer_identity(offer)
            SyncLog.log_error(
                message=f"Error syncing offer: {error}",
                error_details=repr(error),
                offer_id=str(offer_id) if offer_id is not None else False,
                sku=sku,
                payload=offer,
                sync_batch_id=sync_batch_id,
                is_automatic=is_automatic,
            )

        return OfferSynchronizer(
            helper,
            processor=processor,
            notifier=notify,
            error_handler=on_error,
            max_per_page=self._get_int_param('max_per_page', 100),
            progress_every=self._get_int_param('progress_every', 50),
            event_prefix=event_prefix,
        )

    def _log_failure(self, event_prefix, error, sync_batch_id, is_automatic):
        """Registra el fallo en un cursor propio para que sobreviva al rollback"""
        with self.env.registry.cursor() as cr:
            self.env(cr=cr)['mirakl.sync.log'].log_error(
                operation='failed',
                message=f"{event_prefix}.failed",
                error_details=str(error),
                sync_batch_id=sync_batch_id,
                is_automatic=is_automatic,
            )

    def _run_synchronizer(self, processor_factory, filters, is_automatic, event_prefix):
        start_time = time.time()
        sync_batch_id = str(uuid.uuid4())

        processor = processor_factory(sync_batch_id, is_automatic)

        def guarded(offer):
            # Un fallo de una oferta no debe invalidar la transacción
            with self.env.cr.savepoint():
                return processor(offer)

        helper = self._get_mirakl_helper()
        try:
            synchronizer = self._build_synchronizer(
                helper, guarded, sync_batch_id, is_automatic, event_prefix
            )
            try:
                stats = synchronizer.run(filters)
            except Exception as e:
                _logger.error(f"Critical error during Mirakl synchronization: {str(e)}", exc_info=True)
                self._log_failure(event_prefix, e, sync_batch_id, is_automatic)
                raise
        finally:
            helper.client.close()

        stats['sync_batch_id'] = sync_batch_id
        stats['execution_time'] = round(time.time() - start_time, 2)
        return stats

    # ========== Ofertas -> mirakl.offer ==========
    def _offer_processor(self, sync_batch_id, is_automatic):
        Offer = self.env['mirakl.offer']
        SyncLog = self.env['mirakl.sync.log']

        def process(offer):
            operation_start = time.time()
            record, result = Offer.create_from_mirakl(offer)
            SyncLog.log_success(
                operation=OPERATION_BY_RESULT[result],
                message=f"Offer {record.mirakl_id} {result}",
                offer_id=record.mirakl_id,
                sku=record.sku,
                sync_batch_id=sync_batch_id,
                execution_time=time.time() - operation_start,
                is_automatic=is_automatic,
            )
            return result

        return process

    @api.model
    def sync_offers(self, filters=None, is_automatic=False):
        """
        Replica las ofertas de Mirakl en mirakl.offer

        Args:
            filters (dict, optional): 'sku', 'state', 'updated_since'
            is_automatic (bool): Lanzado por cron

        Returns:
            dict: processed, created, updated, skipped, errors, sync_batch_id
        """
        _logger.info("Syncing Mirakl offers into mirakl.offer")
        return self._run_synchronizer(
            self._offer_processor, filters, is_automatic, 'mirakl.sync.offers'
        )

    # ========== Ofertas -> product.template + stock ==========
    def _get_stock_location(self):
        warehouse = self.env['stock.warehouse'].search(
            [('company_id', '=', self.env.company.id)], limit=1
        )
        if not warehouse:
            raise UserError("No warehouse configured for the current company")
        return warehouse.lot_stock_id

    def _sync_stock_level(self, product, quantity, location):
        """Ajusta la cantidad disponible del producto en la ubicación indicada"""
        variant = product.product_variant_id
        if not variant or product.type != 'product':
            return
        quant = self.env['stock.quant'].with_context(inventory_mode=True).create({
            'product_id': variant.id,
            'location_id': location.id,
            'inventory_quantity': quantity,
        })
        quant.action_apply_inventory()

    def _product_processor(self, sync_batch_id, is_automatic):
        ProductTemplate = self.env['product.template']
        SyncLog = self.env['mirakl.sync.log']
        location = self._get_stock_location()

        def process(offer):
            operation_start = time.time()
            sku = offer.get('shop_sku') or offer.get('product_sku')

            product = ProductTemplate.search_by_sku(sku) if sku else ProductTemplate
            if product:
                result = 'updated' if product.update_from_mirakl_offer(offer) else 'skipped'
            else:
                product = ProductTemplate.create_from_mirakl_offer(offer)
                result = 'created'

            self._sync_stock_level(product, int(offer.get('quantity') or 0), location)

            SyncLog.log_success(
                operation=OPERATION_BY_RESULT[result],
                product=product,
                message=f"Product {product.display_name} {result}",
                offer_id=str(offer.get('offer_id', '')),
                sku=sku,
                sync_batch_id=sync_batch_id,
                execution_time=time.time() - operation_start,
                is_automatic=is_automatic,
            )
            return result

        return process

    @api.model
    def sync_offers_to_products(self, filters=None, is_automatic=False):
        """
        Crea o actualiza productos de Odoo y su stock desde las ofertas

        Flujo por oferta:
        1. Buscar producto por SKU (default_code)
        2. Crear o actualizar (skip si no hay cambios)
        3. Ajustar stock en la ubicación del almacén principal
        4. Registrar log

        Returns:
            dict: Resumen de la sincronización
        """
        _logger.info("Syncing Mirakl offers into product.template")
        return self._run_synchronizer(
            self._product_processor, filters, is_automatic, 'mirakl.odoo.sync'
        )

    @api.model
    def run_scheduled_sync(self):
        """
        Método llamado por el cron job
        """
        _logger.info("Running scheduled Mirakl synchronization (CRON)")

        result = self.sync_offers_to_products(is_automatic=True)
        if result['errors'] > 0:
            _logger.warning(f"Mirakl sync finished with errors: {result}")
        return result

    @api.model
    def test_connection(self):
        """
        Prueba la conexión con la API de Mirakl

        Returns:
            dict: Estado de la conexión
        """
        _logger.info("Testing Mirakl API connection...")

        try:
            helper = self._get_mirakl_helper()
        except UserError as e:
            return {'status': 'error', 'message': str(e)}

        try:
            if helper.client.health_check():
                return {'status': 'success', 'message': 'Connection successful'}
            return {'status': 'error', 'message': 'Mirakl API did not answer successfully'}
        finally:
            helper.client.close()
