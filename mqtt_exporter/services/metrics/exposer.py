"""Scrape endpoint for the instrument registry.

Serialization and content negotiation belong to prometheus_client; the
handler only picks the encoder for the request's Accept header and reads the
registry. It never writes instrument values.
"""

from typing import Union

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import Response
from prometheus_client import CollectorRegistry
from prometheus_client.exposition import choose_encoder

MountPoint = Union[FastAPI, APIRouter]


def expose(path: str, mount: MountPoint, registry: CollectorRegistry) -> None:
    """Register a GET handler serving ``registry`` at ``path`` on ``mount``."""

    def scrape_metrics(request: Request) -> Response:
        encoder, content_type = choose_encoder(request.headers.get("accept"))
        return Response(content=encoder(registry), media_type=content_type)

    mount.add_api_route(
        path,
        scrape_metrics,
        methods=["GET"],
        include_in_schema=False,
        name="prometheus_metrics",
    )
