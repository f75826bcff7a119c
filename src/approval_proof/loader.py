"""Read signed request files into SignedRequest models."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .exceptions import RequestLoadError
from .models import SignedRequest

logger = logging.getLogger(__name__)

# Signer tooling may write a UTF-8 byte order mark.
REQUEST_ENCODING = "utf-8-sig"


def parse_request(
    data: Union[str, bytes, Mapping[str, Any]],
    *,
    source: Optional[str] = None,
) -> SignedRequest:
    """Parse JSON text, bytes or an already-decoded mapping."""
    if isinstance(data, bytes):
        try:
            data = data.decode(REQUEST_ENCODING)
        except UnicodeDecodeError as exc:
            raise RequestLoadError(f"Request is not UTF-8: {exc}", source=source) from exc

    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as exc:
            raise RequestLoadError(
                f"Request is not valid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})",
                source=source,
            ) from exc

    if not isinstance(data, Mapping):
        raise RequestLoadError(
            f"Request must be a JSON object, got {type(data).__name__}",
            source=source,
        )

    request = SignedRequest.from_payload(data)
    logger.debug(
        "Parsed signed request",
        extra={"source": source, "results": len(request.validation_results)},
    )
    return request


def load_request(path: Union[str, Path]) -> SignedRequest:
    """Read and parse a ``request.json`` file."""
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise RequestLoadError(f"Cannot read request file: {exc.strerror or exc}", source=str(path)) from exc
    return parse_request(raw, source=str(path))


__all__ = [
    "REQUEST_ENCODING",
    "parse_request",
    "load_request",
]
