# -*- coding: utf-8 -*-
"""
Tests para MiraklConfig
Verifica validación temprana y lectura desde variables de entorno
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from mirakl_connector import ConfigurationError, MiraklClient, MiraklConfig


class TestMiraklConfig:
    """Test suite para MiraklConfig"""

    def test_valid_config(self):
        """Test: Configuración completa con timeout por defecto"""
        config = MiraklConfig(api_url='https://shop.mirakl.net/api', api_key='k', shop_id='s')

        assert config.timeout == 30

    @pytest.mark.parametrize('field', ['api_url', 'api_key', 'shop_id'])
    def test_empty_field_fails_fast(self, field):
        """Test: Cualquier campo vacío falla al construir"""
        values = {'api_url': 'https://shop.mirakl.net/api', 'api_key': 'k', 'shop_id': 's'}
        values[field] = ''

        with pytest.raises(ConfigurationError) as exc_info:
            MiraklConfig(**values)

        assert field in str(exc_info.value)

    def test_client_construction_with_empty_url(self):
        """Test: {api_url: '', api_key: 'k', shop_id: 's'} no permite crear el cliente"""
        with pytest.raises(ConfigurationError):
            MiraklClient(MiraklConfig(api_url='', api_key='k', shop_id='s'))

    def test_invalid_timeout(self):
        """Test: Timeout no positivo es inválido"""
        with pytest.raises(ConfigurationError):
            MiraklConfig(api_url='u', api_key='k', shop_id='s', timeout=0)

    def test_repr_hides_api_key(self):
        """Test: La api_key no aparece en la representación"""
        config = MiraklConfig(api_url='u', api_key='super-secret', shop_id='s')

        assert 'super-secret' not in repr(config)

    def test_from_env(self):
        """Test: Lectura desde variables de entorno"""
        config = MiraklConfig.from_env({
            'MIRAKL_API_URL': 'https://shop.mirakl.net/api',
            'MIRAKL_API_KEY': 'key',
            'MIRAKL_SHOP_ID': '2001',
            'MIRAKL_TIMEOUT': '15',
        })

        assert config.api_url == 'https://shop.mirakl.net/api'
        assert config.shop_id == '2001'
        assert config.timeout == 15

    def test_from_env_default_timeout(self, monkeypatch):
        """Test: MIRAKL_TIMEOUT por defecto es 30"""
        monkeypatch.setenv('MIRAKL_API_URL', 'https://shop.mirakl.net/api')
        monkeypatch.setenv('MIRAKL_API_KEY', 'key')
        monkeypatch.setenv('MIRAKL_SHOP_ID', '2001')
        monkeypatch.delenv('MIRAKL_TIMEOUT', raising=False)

        assert MiraklConfig.from_env().timeout == 30

    def test_from_env_missing_values(self):
        """Test: Variables ausentes producen ConfigurationError"""
        with pytest.raises(ConfigurationError):
            MiraklConfig.from_env({})

    def test_from_env_non_integer_timeout(self):
        """Test: MIRAKL_TIMEOUT no entero es un error de configuración"""
        with pytest.raises(ConfigurationError):
            MiraklConfig.from_env({
                'MIRAKL_API_URL': 'u',
                'MIRAKL_API_KEY': 'k',
                'MIRAKL_SHOP_ID': 's',
                'MIRAKL_TIMEOUT': 'thirty',
            })
