"""Load endpoint tables from package data, a URL, a local file, or stdin.

An endpoint table is a JSON (or YAML) object mapping a namespace key such as
``/shows/summary`` to a descriptor::

    {
        "/shows/summary": {"method": "GET", "url": "/shows/:id", "opts": {"extended": true}},
        "/checkin/add": {"method": "POST", "url": "/checkin", "body": {"movie": null}, "opts": {"auth": true}}
    }

The two public functions are:

* :func:`load_table` -- Load, parse and validate a table from any supported source.
* :func:`parse_table` -- Validate an already-decoded mapping.

The bundled default table lives at ``traktclient/data/methods.json``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Mapping, Optional

import httpx
import yaml
from pydantic import ValidationError

from traktclient.exceptions import ConfigurationError
from traktclient.models import EndpointDescriptor

DEFAULT_TABLE_PATH = Path(__file__).resolve().parent.parent / "data" / "methods.json"
"""Location of the endpoint table shipped with the package."""


def load_table(source: Optional[str] = None) -> dict[str, EndpointDescriptor]:
    """Load an endpoint table.

    Args:
        source: ``None`` for the bundled table, a URL (http/https), a file
            path, or ``'-'`` for stdin. JSON and YAML are both accepted.

    Returns:
        Mapping from namespace key to validated descriptor, in file order.

    Raises:
        ConfigurationError: If the source cannot be read, parsed, or an
            entry fails validation.
    """
    if source is None:
        raw = _load_from_file(str(DEFAULT_TABLE_PATH))
    elif source == "-":
        raw = _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        raw = _load_from_url(source)
    else:
        raw = _load_from_file(source)
    return parse_table(raw)


def parse_table(raw: Mapping[str, Any]) -> dict[str, EndpointDescriptor]:
    """Validate every entry of a decoded table.

    Entries that are already :class:`~traktclient.models.EndpointDescriptor`
    instances are kept as they are.

    Raises:
        ConfigurationError: If an entry is not a valid descriptor. The
            message names the offending key.
    """
    table: dict[str, EndpointDescriptor] = {}
    for key, entry in raw.items():
        if isinstance(entry, EndpointDescriptor):
            table[key] = entry
            continue
        try:
            table[key] = EndpointDescriptor.model_validate(entry)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid endpoint '{key}': {exc}") from exc
    return table


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise ConfigurationError(f"Failed to read endpoint table from stdin: {exc}") from exc

    if not content.strip():
        raise ConfigurationError("No endpoint table received on stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a table over HTTP, using the content type as a format hint."""
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise ConfigurationError(
            f"HTTP {exc.response.status_code} fetching endpoint table from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise ConfigurationError(f"Failed to fetch endpoint table from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.is_file():
        raise ConfigurationError(f"Endpoint table not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to read endpoint table {path}: {exc}") from exc

    if not content.strip():
        raise ConfigurationError(f"Endpoint table is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON, falling back to YAML unless the hint says JSON.

    Raises:
        ConfigurationError: If the content is neither, or is not an object.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise ConfigurationError(f"Invalid JSON endpoint table: {exc}") from exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse endpoint table as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise ConfigurationError(msg) from exc

    return _require_mapping(result)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise ConfigurationError(f"Endpoint table must be an object (got {kind})")
    return result
