# -*- coding: utf-8 -*-
"""
Jerarquía de excepciones del conector Mirakl
"""

from typing import Mapping, Optional, Sequence

from .models import first_header


class MiraklError(Exception):
    """Excepción base para todos los errores del conector"""


class ConfigurationError(MiraklError, ValueError):
    """Configuración incompleta o inválida (nunca se reintenta)"""


class MiraklConnectionError(MiraklError, ConnectionError):
    """No se pudo completar el round trip (timeout, DNS, TLS, conexión rechazada)"""


class DecodeError(MiraklError, ValueError):
    """El cuerpo de la respuesta no es JSON válido"""


class RetryExhausted(MiraklError, RuntimeError):
    """El bucle de reintentos terminó sin respuesta ni error"""


class TransportError(MiraklError):
    """
    Respuesta HTTP no exitosa (fuera de 2xx)

    Attributes:
        status_code: Código HTTP recibido
        headers: Cabeceras de la respuesta (nombre -> valores)
        body: Cuerpo crudo de la respuesta
    """

    def __init__(
        self,
        status_code: int,
        headers: Optional[Mapping[str, Sequence[str]]] = None,
        body: bytes = b'',
    ):
        self.status_code = status_code
        self.headers = dict(headers or {})
        self.body = body
        super().__init__(f"Mirakl API error {status_code}: {body[:200]!r}")

    def header(self, name: str) -> Optional[str]:
        """Primer valor de una cabecera (sin distinguir mayúsculas)"""
        return first_header(self.headers, name)
