# -*- coding: utf-8 -*-
"""
Modelo para registrar logs de sincronización con Mirakl
Proporciona trazabilidad de cada oferta procesada y de cada ejecución
"""

from odoo import models, fields, api
import logging
import json

_logger = logging.getLogger(__name__)

ITEM_OPERATIONS = ('create', 'update', 'skip', 'error')

LOG_LEVELS = {
    'success': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
}


class MiraklSyncLog(models.Model):
    """
    Registro de eventos de sincronización con Mirakl

    Una fila por oferta procesada (create/update/skip/error) y una por
    evento de ciclo de vida de cada ejecución (started/completed/failed).
    """
    _name = 'mirakl.sync.log'
    _description = 'Mirakl Synchronization Log'
    _order = 'create_date desc, id desc'

    operation = fields.Selection(
        selection=[
            ('create', 'Create'),
            ('update', 'Update'),
            ('skip', 'Skip (No Changes)'),
            ('error', 'Error'),
            ('started', 'Sync Started'),
            ('completed', 'Sync Completed'),
            ('failed', 'Sync Failed'),
        ],
        string='Operation',
        required=True,
    )

    status = fields.Selection(
        selection=[
            ('success', 'Success'),
            ('error', 'Error'),
            ('warning', 'Warning'),
        ],
        string='Status',
        required=True,
        default='success',
    )

    product_id = fields.Many2one(
        comodel_name='product.template',
        string='Product',
        ondelete='set null',
        index=True,
    )

    offer_id = fields.Char(
        string='Mirakl Offer ID',
        index=True,
    )

    sku = fields.Char(
        string='SKU',
        index=True,
    )

    message = fields.Text(string='Message')

    error_details = fields.Text(string='Error Details')

    payload = fields.Text(
        string='Payload',
        help='Oferta recibida o datos del evento (JSON)',
    )

    sync_batch_id = fields.Char(
        string='Sync Batch ID',
        index=True,
        help='Agrupa las operaciones de una misma ejecución',
    )

    execution_time = fields.Float(
        string='Execution Time (s)',
        digits=(10, 3),
    )

    is_automatic = fields.Boolean(
        string='Automatic',
        default=True,
        help='Sincronización lanzada por cron (True) o manualmente (False)',
    )

    # ========== Registro ==========
    @api.model
    def log_operation(self, operation, product=None, status='success', message='',
                      payload=None, **values):
        """
        Crea una fila de log y la replica en el logger del módulo

        Args:
            operation (str): Operación por oferta o evento de la ejecución
            product (product.template, optional): Producto afectado
            status (str): 'success', 'error' o 'warning'
            message (str): Texto descriptivo
            payload (dict, optional): Oferta o datos del evento
            **values: offer_id, sku, error_details, sync_batch_id,
                execution_time, is_automatic

        Returns:
            mirakl.sync.log: Registro creado
        """
        values.update(operation=operation, status=status, message=message)
        if product:
            values['product_id'] = product.id
        if payload:
            values['payload'] = json.dumps(payload, indent=2, default=str)

        record = self.create(values)
        _logger.log(LOG_LEVELS.get(status, logging.INFO), f"[{operation.upper()}] {message}")
        return record

    @api.model
    def log_success(self, operation, product=None, message='', **kwargs):
        return self.log_operation(operation, product=product, message=message, **kwargs)

    @api.model
    def log_error(self, message='', error_details=None, operation='error', **kwargs):
        return self.log_operation(
            operation, status='error', message=message, error_details=error_details, **kwargs
        )

    # ========== Consultas ==========
    @api.model
    def get_statistics(self, sync_batch_id=None, date_from=None, date_to=None):
        """
        Agrega las operaciones por oferta (los eventos de ejecución no cuentan)

        Returns:
            dict: totales por operación y estado, tiempo total y tasa de éxito
        """
        domain = [('operation', 'in', ITEM_OPERATIONS)]
        if sync_batch_id:
            domain.append(('sync_batch_id', '=', sync_batch_id))
        if date_from:
            domain.append(('create_date', '>=', date_from))
        if date_to:
            domain.append(('create_date', '<=', date_to))

        groups = self.read_group(
            domain, ['execution_time:sum'], ['operation', 'status'], lazy=False
        )

        by_operation = dict.fromkeys(ITEM_OPERATIONS, 0)
        by_status = {'success': 0, 'error': 0, 'warning': 0}
        elapsed = 0.0
        for group in groups:
            by_operation[group['operation']] += group['__count']
            by_status[group['status']] += group['__count']
            elapsed += group['execution_time'] or 0.0

        total = sum(by_operation.values())
        return {
            'total_operations': total,
            'success_count': by_status['success'],
            'error_count': by_status['error'],
            'created_count': by_operation['create'],
            'updated_count': by_operation['update'],
            'skipped_count': by_operation['skip'],
            'total_execution_time': round(elapsed, 2),
            'success_rate': round(by_status['success'] * 100 / total, 2) if total else 0,
        }

    @api.model
    def get_recent_errors(self, limit=10):
        return self.search([('status', '=', 'error')], limit=limit)

    @api.model
    def cleanup_old_logs(self, days=30):
        """
        Borra los logs con más de `days` días, salvo los errores

        Returns:
            int: Número de registros borrados
        """
        cutoff = fields.Datetime.subtract(fields.Datetime.now(), days=days)
        stale = self.search([('create_date', '<', cutoff), ('status', '!=', 'error')])
        count = len(stale)
        stale.unlink()
        _logger.info(f"Removed {count} Mirakl sync logs older than {days} days")
        return count
