"""HTTP helpers shared by modules that talk to the X1 services."""

from typing import Any

import httpx


def decode_body(response: httpx.Response) -> Any:
    """Decode a JSON body, falling back to raw text."""
    try:
        return response.json()
    except ValueError:
        return response.text
