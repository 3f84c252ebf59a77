# -*- coding: utf-8 -*-
{
    'name': 'Mirakl Synchronization',
    'version': '17.0.1.0.0',
    'category': 'Sales/Integration',
    'summary': 'Sincronización de ofertas del marketplace Mirakl con Odoo',
    'description': """
        Mirakl Synchronization Module
        ==============================

        Este módulo integra la API de tienda de Mirakl con Odoo.

        Características principales:
        ----------------------------
        * Réplica local de ofertas de Mirakl (mirakl.offer)
        * Creación/actualización de productos y stock desde las ofertas
        * Paginación completa con reintentos ante rate limiting (429)
        * Sincronización automática mediante cron job
        * Idempotencia garantizada (evita duplicados)
        * Logs estructurados y trazabilidad completa

        Configuración:
        --------------
        Parámetros del sistema mirakl_sync.api_url, mirakl_sync.api_key
        y mirakl_sync.shop_id.
    """,
    'author': 'Mirakl Sync Contributors',
    'license': 'LGPL-3',
    'depends': [
        'base',
        'product',
        'stock',
    ],
    'external_dependencies': {
        'python': ['requests', 'mirakl_connector'],
    },
    'data': [
        'security/ir.model.access.csv',
        'data/mirakl_config.xml',
        'data/ir_cron.xml',
    ],
    'demo': [],
    'post_init_hook': 'post_init_hook',
    'uninstall_hook': 'uninstall_hook',
    'installable': True,
    'application': False,
    'auto_install': False,
}
