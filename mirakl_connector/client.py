# -*- coding: utf-8 -*-
"""
Cliente HTTP para la API de tienda de Mirakl
Un solo intento por petición: los reintentos viven en MiraklHelper
"""

import requests
import logging
from typing import Optional

from .api_requests import ApiRequest, GetAccountRequest
from .config import MiraklConfig
from .exceptions import MiraklConnectionError, MiraklError, TransportError
from .models import ApiResponse

_logger = logging.getLogger(__name__)

USER_AGENT = 'Odoo-MiraklSync/1.0'


class MiraklClient:
    """
    Cliente de transporte para Mirakl

    Características:
    - Autenticación por cabecera Authorization con la api_key
    - shop_id añadido a cada petición
    - Timeout configurable
    - Errores HTTP y de red traducidos a excepciones propias
    """

    def __init__(self, config: MiraklConfig, session: Optional[requests.Session] = None):
        """
        Inicializa el cliente

        Args:
            config: Configuración validada (falla antes si está incompleta)
            session: Sesión HTTP a reutilizar; se crea una si no se indica
        """
        self.config = config
        self.base_url = config.api_url.rstrip('/')
        self.timeout = config.timeout
        self.session = session or requests.Session()

        self.session.headers.update({
            'Authorization': config.api_key,
            'Accept': 'application/json',
            'User-Agent': USER_AGENT,
        })

        _logger.info(
            f"MiraklClient initialized: {self.base_url} "
            f"(shop={config.shop_id}, timeout={self.timeout}s)"
        )

    @classmethod
    def from_env(cls) -> 'MiraklClient':
        return cls(MiraklConfig.from_env())

    def execute(self, request: ApiRequest) -> ApiResponse:
        """
        Ejecuta una petición (un único intento)

        Args:
            request: Petición a enviar

        Returns:
            Respuesta con status, cabeceras y cuerpo crudo

        Raises:
            TransportError: Si la API responde con un status fuera de 2xx
            MiraklConnectionError: Si no se pudo completar el round trip
        """
        url = f"{self.base_url}{request.endpoint}"
        params = dict(request.query_params())
        params['shop_id'] = self.config.shop_id

        _logger.debug(f"{request.method} {url} params={params}")

        try:
            raw = self.session.request(
                method=request.method,
                url=url,
                params=params,
                json=request.body(),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            _logger.warning(f"Request timeout after {self.timeout}s: {request.method} {url}")
            raise MiraklConnectionError(f"Timeout calling {url}: {e}") from e
        except requests.exceptions.RequestException as e:
            _logger.warning(f"Connection error: {request.method} {url}: {e}")
            raise MiraklConnectionError(f"Could not reach {url}: {e}") from e

        response = ApiResponse.from_requests(raw)
        _logger.debug(f"Response: {response.status_code} ({len(response.body)} bytes)")

        if not response.ok:
            _logger.debug(f"Mirakl returned {response.status_code} for {request.method} {url}")
            raise TransportError(response.status_code, response.headers, response.body)

        return response

    def health_check(self) -> bool:
        """
        Verifica que la API responda con las credenciales configuradas

        Returns:
            True si el endpoint de cuenta responde 2xx
        """
        try:
            self.execute(GetAccountRequest())
            return True
        except MiraklError as e:
            _logger.warning(f"Mirakl health check failed: {e}")
            return False

    def close(self):
        """Cierra la sesión HTTP"""
        self.session.close()
        _logger.info("MiraklClient session closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
