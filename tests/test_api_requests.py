# -*- coding: utf-8 -*-
"""
Tests para las peticiones de Mirakl
Verifica endpoints y parámetros de query string
"""

from datetime import datetime, timedelta, timezone

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from mirakl_connector import (
    GetOfferRequest,
    GetOffersRequest,
    GetOrdersRequest,
    GetProductsRequest,
    Paginatable,
    ProductReference,
)
from mirakl_connector.api_requests import format_date


class TestRequests:
    """Test suite para ApiRequest y subclases"""

    def test_offers_request_is_paginatable(self):
        """Test: OF21 y OR11 admiten paginación, P31 y OF22 no"""
        assert isinstance(GetOffersRequest(), Paginatable)
        assert isinstance(GetOrdersRequest(), Paginatable)
        assert not isinstance(GetProductsRequest(), Paginatable)
        assert not isinstance(GetOfferRequest(1), Paginatable)

    def test_unpaged_request_has_no_page_params(self):
        """Test: Sin set_page no se envían max/offset"""
        assert GetOffersRequest().query_params() == {}

    def test_offers_from_filters(self):
        """Test: Filtros del comando se traducen a parámetros de OF21"""
        request = GetOffersRequest.from_filters({
            'sku': 'ABC123',
            'state': '11',
            'updated_since': datetime(2024, 1, 1),
        })
        request.set_page(100, 200)

        assert request.endpoint == '/offers'
        assert request.query_params() == {
            'max': 100,
            'offset': 200,
            'sku': 'ABC123',
            'offer_state_codes': '11',
            'updated_since': '2024-01-01T00:00:00Z',
        }

    def test_orders_request_params(self):
        """Test: Fechas y estados de pedidos"""
        request = GetOrdersRequest(
            start_date=datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2))),
            end_date=datetime(2024, 2, 1),
            order_states=['WAITING_ACCEPTANCE', 'SHIPPING'],
        )

        assert request.query_params() == {
            'start_date': '2024-01-01T10:00:00Z',
            'end_date': '2024-02-01T00:00:00Z',
            'order_state_codes': 'WAITING_ACCEPTANCE,SHIPPING',
        }

    def test_products_request_references(self):
        """Test: Referencias de producto como dicts o ProductReference"""
        request = GetProductsRequest([
            {'type': 'EAN', 'reference': '1234567890123'},
            ProductReference('UPC', '042100005264'),
        ])

        assert request.query_params() == {
            'product_references': 'EAN|1234567890123,UPC|042100005264',
        }

    def test_single_offer_endpoint(self):
        """Test: OF22 incluye el id en la ruta"""
        assert GetOfferRequest(2042).endpoint == '/offers/2042'

    def test_format_date_naive_is_utc(self):
        """Test: Fechas sin zona se asumen UTC"""
        assert format_date(datetime(2024, 5, 6, 7, 8, 9)) == '2024-05-06T07:08:09Z'
