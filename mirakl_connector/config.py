# -*- coding: utf-8 -*-
"""
Configuración del cliente Mirakl

Se construye una sola vez al arrancar el proceso y no cambia después.
"""

import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from .exceptions import ConfigurationError

_logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30

ENV_API_URL = 'MIRAKL_API_URL'
ENV_API_KEY = 'MIRAKL_API_KEY'
ENV_SHOP_ID = 'MIRAKL_SHOP_ID'
ENV_TIMEOUT = 'MIRAKL_TIMEOUT'


@dataclass(frozen=True)
class MiraklConfig:
    """
    Credenciales y parámetros de conexión a Mirakl

    Attributes:
        api_url: URL base de la instancia (ej: https://tu-instancia.mirakl.net/api)
        api_key: Clave de autenticación de la API
        shop_id: Identificador de la tienda a usar
        timeout: Timeout en segundos para cada petición
    """

    api_url: str
    api_key: str
    shop_id: str
    timeout: int = DEFAULT_TIMEOUT

    def __post_init__(self):
        missing = [
            name for name in ('api_url', 'api_key', 'shop_id')
            if not str(getattr(self, name) or '').strip()
        ]
        if missing:
            raise ConfigurationError(
                "Mirakl API configuration is incomplete, missing: "
                f"{', '.join(missing)}. Please set {ENV_API_URL}, "
                f"{ENV_API_KEY} and {ENV_SHOP_ID}."
            )

        if isinstance(self.timeout, bool) or not isinstance(self.timeout, int) or self.timeout <= 0:
            raise ConfigurationError(f"Invalid Mirakl timeout: {self.timeout!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'MiraklConfig':
        """
        Lee la configuración desde variables de entorno

        Args:
            environ: Mapeo a usar en lugar de os.environ (útil en tests)

        Returns:
            MiraklConfig validada

        Raises:
            ConfigurationError: Si falta algún campo o el timeout no es entero
        """
        environ = os.environ if environ is None else environ

        raw_timeout = environ.get(ENV_TIMEOUT) or str(DEFAULT_TIMEOUT)
        try:
            timeout = int(raw_timeout)
        except ValueError:
            raise ConfigurationError(f"{ENV_TIMEOUT} must be an integer, got {raw_timeout!r}")

        config = cls(
            api_url=environ.get(ENV_API_URL, ''),
            api_key=environ.get(ENV_API_KEY, ''),
            shop_id=environ.get(ENV_SHOP_ID, ''),
            timeout=timeout,
        )
        _logger.debug(f"Mirakl configuration loaded from environment: {config.api_url}")
        return config

    def __repr__(self):
        # Nunca exponer la api_key en logs
        return (
            f"MiraklConfig(api_url={self.api_url!r}, shop_id={self.shop_id!r}, "
            f"timeout={self.timeout})"
        )
