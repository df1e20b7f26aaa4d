"""Build listing and cancellation against the platform build resources."""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from typing import Protocol, cast

import httpx

from rbc.client.errors import ConfigError, ParseError

BUILDS_PATH_TEMPLATE = "/oapi/v1/namespaces/{namespace}/builds"
BUILD_CONFIG_LABELS = ("openshift.io/build-config.name", "buildconfig")

Document = dict[str, object]

logger = logging.getLogger(__name__)


class TransportLike(Protocol):
    """GET/PUT surface the builds client needs from a transport."""

    def get(self, url: str) -> str:
        """Return the response body for a GET of `url`."""
        ...

    def put(self, url: str, document: Document) -> str:
        """Return the response body for a PUT of `document` to `url`."""
        ...


@dataclass(frozen=True, slots=True)
class Build:
    """One build resource as observed in the namespace listing."""

    name: str
    namespace: str
    phase: str
    document: Document = field(compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class CancellationResult:
    """Outcome details for one successful build cancellation."""

    name: str
    document_before: Document
    status_before: object
    status_after: object
    response_body: str


class BuildsClient:
    """List and cancel builds in one namespace through a transport."""

    _transport: TransportLike
    _collection_url: str
    _namespace: str

    def __init__(
        self,
        *,
        transport: TransportLike,
        api_url: str,
        namespace: str,
    ) -> None:
        """Create client; raises ConfigError for unusable URL parts."""
        base_url = _validate_base_url(api_url)
        _validate_segment(what="namespace", value=namespace)
        self._transport = transport
        self._namespace = namespace
        self._collection_url = base_url + BUILDS_PATH_TEMPLATE.format(
            namespace=namespace,
        )

    @property
    def collection_url(self) -> str:
        """Return the namespace build collection URL."""
        return self._collection_url

    def build_url(self, name: str) -> str:
        """Return the URL of one named build in the namespace."""
        _validate_segment(what="build name", value=name)
        return f"{self._collection_url}/{name}"

    def list_builds(self) -> list[Build]:
        """Fetch the namespace builds in the order the server returned them."""
        url = self._collection_url
        document = decode_document(self._transport.get(url), url=url)
        raw_items = document.get("items")
        if raw_items is None:
            return []
        if not isinstance(raw_items, list):
            raise ParseError.for_field(url=url, field="items", expected="a list")
        return [
            self._decode_build(item, url=url)
            for item in cast("list[object]", raw_items)
        ]

    def get_build(self, name: str) -> Document:
        """Fetch the current document of one build."""
        url = self.build_url(name)
        return decode_document(self._transport.get(url), url=url)

    def cancel_build(self, name: str) -> CancellationResult:
        """Re-read the build, set `status.cancelled` and write it back whole.

        The PUT carries the freshly fetched document, not the listing
        snapshot. Nothing guards against a concurrent writer between the
        read and the write; a stale `resourceVersion` rejected by the server
        surfaces as a TransportError.
        """
        url = self.build_url(name)
        document = self.get_build(name)
        document_before = copy.deepcopy(document)
        status_before = copy.deepcopy(document.get("status"))
        status = _ensure_status(document, url=url)
        status["cancelled"] = True
        response_body = self._transport.put(url, document)
        logger.debug("Cancelled build %s in namespace %s", name, self._namespace)
        return CancellationResult(
            name=name,
            document_before=document_before,
            status_before=status_before,
            status_after=copy.deepcopy(status),
            response_body=response_body,
        )

    def _decode_build(self, item: object, *, url: str) -> Build:
        if not isinstance(item, dict):
            raise ParseError.for_field(url=url, field="items[]", expected="an object")
        document = cast("Document", item)
        metadata = document.get("metadata")
        name = (
            cast("dict[str, object]", metadata).get("name")
            if isinstance(metadata, dict)
            else None
        )
        if not isinstance(name, str) or not name:
            raise ParseError.for_field(
                url=url,
                field="metadata.name",
                expected="a non-empty string",
            )
        return Build(
            name=name,
            namespace=self._namespace,
            phase=_read_phase(document),
            document=document,
        )


def decode_document(body: str, *, url: str) -> Document:
    """Decode a JSON object body, raising ParseError otherwise.

    Non-finite constants such as `NaN` and `Infinity` raise ParseError, so
    every decoded document can be serialized again for the write-back.
    """

    def _reject_constant(constant: str) -> object:
        raise ParseError.for_body(
            url=url,
            reason=f"non-finite number {constant} is not valid JSON",
        )

    try:
        decoded = cast("object", json.loads(body, parse_constant=_reject_constant))
    except ValueError as exc:
        raise ParseError.for_body(url=url, reason=str(exc)) from exc
    if not isinstance(decoded, dict):
        raise ParseError.for_body(url=url, reason="top-level value is not an object")
    return cast("Document", decoded)


def owning_build_config(document: Document) -> str | None:
    """Return the build config name a build document belongs to, if known."""
    metadata = document.get("metadata")
    if isinstance(metadata, dict):
        labels = cast("dict[str, object]", metadata).get("labels")
        if isinstance(labels, dict):
            for label in BUILD_CONFIG_LABELS:
                value = cast("dict[str, object]", labels).get(label)
                if isinstance(value, str) and value:
                    return value
    status = document.get("status")
    if isinstance(status, dict):
        config = cast("dict[str, object]", status).get("config")
        if isinstance(config, dict):
            name = cast("dict[str, object]", config).get("name")
            if isinstance(name, str) and name:
                return name
    return None


def _read_phase(document: Document) -> str:
    status = document.get("status")
    if not isinstance(status, dict):
        return ""
    phase = cast("dict[str, object]", status).get("phase")
    return phase if isinstance(phase, str) else ""


def _ensure_status(document: Document, *, url: str) -> dict[str, object]:
    status = document.get("status")
    if status is None:
        status = {}
        document["status"] = status
    if not isinstance(status, dict):
        raise ParseError.for_field(url=url, field="status", expected="an object")
    return cast("dict[str, object]", status)


def _validate_base_url(api_url: str) -> str:
    try:
        parsed = httpx.URL(api_url)
    except httpx.InvalidURL as exc:
        raise ConfigError.for_base_url(api_url=api_url, reason=str(exc)) from exc
    if parsed.scheme not in {"http", "https"}:
        raise ConfigError.for_base_url(
            api_url=api_url,
            reason="scheme must be http or https",
        )
    if not parsed.host:
        raise ConfigError.for_base_url(api_url=api_url, reason="missing host")
    if parsed.query or parsed.fragment:
        raise ConfigError.for_base_url(
            api_url=api_url,
            reason="query and fragment are not allowed",
        )
    return api_url.rstrip("/")


def _validate_segment(*, what: str, value: str) -> None:
    if not value or value in {".", ".."} or any(c in value for c in "/?#"):
        raise ConfigError.for_path_segment(field=what, value=value)
