# -*- coding: utf-8 -*-
"""
Tests de Integración para Mirakl Sync
Requiere entorno de Odoo activo
"""

from odoo.tests.common import TransactionCase
from odoo.exceptions import UserError
from unittest.mock import patch
import json

from mirakl_connector import MiraklClient, TransportError
from mirakl_connector.models import ApiResponse


def make_offer(offer_id, **overrides):
    offer = {
        'offer_id': offer_id,
        'shop_sku': f'MRK-{offer_id}',
        'product_title': f'Mirakl Product {offer_id}',
        'price': 19.99,
        'origin_price': 12.5,
        'quantity': 7,
        'state_code': '11',
        'active': True,
        'update_date': '2026-03-01T08:30:00Z',
    }
    offer.update(overrides)
    return offer


def offers_page(offers, total=None):
    body = {'offers': offers, 'total_count': len(offers) if total is None else total}
    return ApiResponse(status_code=200, body=json.dumps(body).encode())


class TestMiraklOffer(TransactionCase):
    """Tests del modelo mirakl.offer"""

    def test_create_then_skip_then_update(self):
        """Test: create_from_mirakl es idempotente por mirakl_id"""
        Offer = self.env['mirakl.offer']

        record, result = Offer.create_from_mirakl(make_offer(501))
        self.assertEqual(result, 'created')
        self.assertEqual(record.mirakl_id, '501')
        self.assertEqual(record.sku, 'MRK-501')
        self.assertEqual(record.quantity, 7)
        self.assertEqual(record.mirakl_updated_at.isoformat(), '2026-03-01T08:30:00')

        _, result = Offer.create_from_mirakl(make_offer(501))
        self.assertEqual(result, 'skipped')

        _, result = Offer.create_from_mirakl(make_offer(501, quantity=2))
        self.assertEqual(result, 'updated')
        self.assertEqual(record.quantity, 2)
        self.assertEqual(Offer.search_count([('mirakl_id', '=', '501')]), 1)

    def test_inactive_offer_is_archived(self):
        """Test: Ofertas inactivas se actualizan aunque estén archivadas"""
        Offer = self.env['mirakl.offer']
        record, _ = Offer.create_from_mirakl(make_offer(502, active=False))

        self.assertFalse(record.active)
        _, result = Offer.create_from_mirakl(make_offer(502, active=True))
        self.assertEqual(result, 'updated')
        self.assertTrue(record.active)

    def test_search_helpers(self):
        """Test: Búsquedas por estado, SKU y stock bajo"""
        Offer = self.env['mirakl.offer']
        Offer.create_from_mirakl(make_offer(503, quantity=1))
        Offer.create_from_mirakl(make_offer(504, quantity=40, state_code='1'))

        self.assertIn('504', Offer.search_by_state('1').mapped('mirakl_id'))
        self.assertEqual(Offer.search_by_sku('MRK-503').mirakl_id, '503')
        low = Offer.search_low_stock(threshold=5).mapped('mirakl_id')
        self.assertIn('503', low)
        self.assertNotIn('504', low)

    def test_invalid_date_is_ignored(self):
        """Test: Fecha no válida no impide guardar la oferta"""
        record, _ = self.env['mirakl.offer'].create_from_mirakl(make_offer(505, update_date='yesterday'))

        self.assertFalse(record.mirakl_updated_at)


class TestProductFromOffer(TransactionCase):
    """Tests de product.template desde ofertas"""

    def test_product_creation_from_offer(self):
        """Test: Crear producto desde oferta de Mirakl"""
        product = self.env['product.template'].create_from_mirakl_offer(make_offer(601))

        self.assertEqual(product.name, 'Mirakl Product 601')
        self.assertEqual(product.default_code, 'MRK-601')
        self.assertEqual(product.list_price, 19.99)
        self.assertEqual(product.standard_price, 12.5)
        self.assertEqual(product.mirakl_offer_id, '601')
        self.assertTrue(product.mirakl_last_sync)

    def test_product_update_and_no_changes(self):
        """Test: update_from_mirakl_offer retorna True solo si hay cambios"""
        product = self.env['product.template'].create_from_mirakl_offer(make_offer(602))

        self.assertFalse(product.update_from_mirakl_offer(make_offer(602)))
        self.assertTrue(product.update_from_mirakl_offer(make_offer(602, price=25.0)))
        self.assertEqual(product.list_price, 25.0)

    def test_offer_without_sku_fails(self):
        """Test: Oferta sin SKU lanza ValueError"""
        with self.assertRaises(ValueError):
            self.env['product.template'].create_from_mirakl_offer(
                make_offer(603, shop_sku=None)
            )

    def test_search_by_sku(self):
        """Test: Búsqueda por default_code"""
        product = self.env['product.template'].create_from_mirakl_offer(make_offer(604))

        self.assertEqual(self.env['product.template'].search_by_sku('MRK-604'), product)


class TestSyncLog(TransactionCase):
    """Tests del modelo mirakl.sync.log"""

    def test_statistics_by_batch(self):
        """Test: Estadísticas solo cuentan operaciones por oferta"""
        SyncLog = self.env['mirakl.sync.log']
        batch = 'batch-stats'
        SyncLog.log_operation('started', message='start', sync_batch_id=batch)
        SyncLog.log_success('create', message='ok', sync_batch_id=batch, execution_time=0.5)
        SyncLog.log_success('skip', message='same', sync_batch_id=batch, execution_time=0.25)
        SyncLog.log_error('boom', error_details='ValueError', sync_batch_id=batch)

        stats = SyncLog.get_statistics(sync_batch_id=batch)

        self.assertEqual(stats['total_operations'], 3)
        self.assertEqual(stats['created_count'], 1)
        self.assertEqual(stats['skipped_count'], 1)
        self.assertEqual(stats['error_count'], 1)
        self.assertEqual(stats['total_execution_time'], 0.75)

    def test_payload_is_stored_as_json(self):
        """Test: El payload se guarda serializado"""
        log = self.env['mirakl.sync.log'].log_operation('error', payload={'offer_id': 7}, status='error')

        self.assertEqual(json.loads(log.payload), {'offer_id': 7})
        self.assertIn(log, self.env['mirakl.sync.log'].get_recent_errors())


class TestMiraklSyncService(TransactionCase):
    """Tests del servicio de sincronización"""

    def setUp(self):
        super().setUp()
        params = self.env['ir.config_parameter'].sudo()
        params.set_param('mirakl_sync.api_url', 'http://test-mirakl:8000/api')
        params.set_param('mirakl_sync.api_key', 'test-key')
        params.set_param('mirakl_sync.shop_id', '2001')
        params.set_param('mirakl_sync.max_per_page', '2')
        self.service = self.env['mirakl.sync.service']

    def test_missing_configuration_raises_user_error(self):
        """Test: Sin api_key la sincronización no arranca"""
        self.env['ir.config_parameter'].sudo().set_param('mirakl_sync.api_key', '')

        with self.assertRaises(UserError):
            self.service.sync_offers()

    @patch.object(MiraklClient, 'execute')
    def test_sync_offers(self, mock_execute):
        """Test: Sincroniza todas las páginas en mirakl.offer"""
        mock_execute.side_effect = [
            offers_page([make_offer(701), make_offer(702)], total=3),
            offers_page([make_offer(703)], total=3),
        ]

        result = self.service.sync_offers()

        self.assertEqual(result['processed'], 3)
        self.assertEqual(result['created'], 3)
        self.assertEqual(result['errors'], 0)
        self.assertEqual(mock_execute.call_count, 2)

        logs = self.env['mirakl.sync.log'].search([('sync_batch_id', '=', result['sync_batch_id'])])
        self.assertEqual(
            sorted(logs.mapped('operation')),
            ['completed', 'create', 'create', 'create', 'started'],
        )

    @patch.object(MiraklClient, 'execute')
    def test_sync_offers_isolates_bad_offer(self, mock_execute):
        """Test: Una oferta inválida se registra y no detiene el resto"""
        mock_execute.return_value = offers_page([make_offer(711), {'shop_sku': 'NO-ID'}])

        result = self.service.sync_offers()

        self.assertEqual(result['processed'], 1)
        self.assertEqual(result['errors'], 1)
        errors = self.env['mirakl.sync.log'].search([
            ('sync_batch_id', '=', result['sync_batch_id']),
            ('status', '=', 'error'),
        ])
        self.assertEqual(errors.sku, 'NO-ID')

    @patch.object(MiraklClient, 'execute')
    def test_sync_offers_null_item_is_isolated(self, mock_execute):
        """Test: Un elemento null en la página cuenta como error y no aborta"""
        mock_execute.return_value = offers_page([None, make_offer(712)])

        result = self.service.sync_offers()

        self.assertEqual(result['created'], 1)
        self.assertEqual(result['errors'], 1)
        error_log = self.env['mirakl.sync.log'].search([
            ('sync_batch_id', '=', result['sync_batch_id']),
            ('status', '=', 'error'),
        ])
        self.assertEqual(len(error_log), 1)
        self.assertFalse(error_log.offer_id)

    @patch.object(MiraklClient, 'close')
    def test_invalid_page_size_param_closes_client(self, mock_close):
        """Test: Un parámetro no numérico lanza UserError y cierra la sesión"""
        self.env['ir.config_parameter'].sudo().set_param('mirakl_sync.max_per_page', 'abc')

        with self.assertRaises(UserError):
            self.service.sync_offers()

        mock_close.assert_called_once()

    @patch.object(MiraklClient, 'execute')
    def test_sync_failure_is_reraised(self, mock_execute):
        """Test: Un error de la API se registra como failed y se relanza"""
        mock_execute.side_effect = TransportError(503, {}, b'unavailable')

        with patch.object(type(self.service), '_log_failure') as mock_log_failure:
            with self.assertRaises(TransportError):
                self.service.sync_offers()

        mock_log_failure.assert_called_once()

    @patch.object(MiraklClient, 'execute')
    def test_sync_offers_to_products(self, mock_execute):
        """Test: Crea productos y ajusta stock desde las ofertas"""
        mock_execute.return_value = offers_page([make_offer(801, quantity=12)])

        result = self.service.sync_offers_to_products()

        self.assertEqual(result['created'], 1)
        product = self.env['product.template'].search_by_sku('MRK-801')
        self.assertTrue(product)
        self.assertEqual(product.qty_available, 12)

        mock_execute.return_value = offers_page([make_offer(801, quantity=12)])
        result = self.service.sync_offers_to_products()
        self.assertEqual(result['skipped'], 1)

    @patch.object(MiraklClient, 'health_check', return_value=True)
    def test_connection(self, mock_health_check):
        """Test: test_connection usa el health check del cliente"""
        self.assertEqual(self.service.test_connection()['status'], 'success')

        mock_health_check.return_value = False
        self.assertEqual(self.service.test_connection()['status'], 'error')
