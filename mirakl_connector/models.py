# -*- coding: utf-8 -*-
"""
Estructuras de datos intercambiadas con la API de Mirakl
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


def first_header(headers: Mapping[str, Sequence[str]], name: str) -> Optional[str]:
    """
    Retorna el primer valor de una cabecera, sin distinguir mayúsculas

    Args:
        headers: Cabeceras (nombre -> secuencia de valores)
        name: Nombre de la cabecera buscada

    Returns:
        Primer valor o None si la cabecera no existe
    """
    wanted = name.lower()
    for key, values in headers.items():
        if key.lower() == wanted and values:
            return values if isinstance(values, str) else values[0]
    return None


@dataclass(frozen=True)
class ApiResponse:
    """Respuesta HTTP recibida de Mirakl (inmutable)"""

    status_code: int
    headers: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    body: bytes = b''

    @classmethod
    def from_requests(cls, response) -> 'ApiResponse':
        """Construye la respuesta a partir de un requests.Response"""
        headers = {name: (value,) for name, value in response.headers.items()}
        return cls(
            status_code=response.status_code,
            headers=headers,
            body=response.content or b'',
        )

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str) -> Optional[str]:
        return first_header(self.headers, name)


@dataclass
class PageResult:
    """Una página decodificada: items y total anunciado por la API"""

    items: List[Dict[str, Any]]
    total_count: int
