# api/v1/endpoints/deps.py
from fastapi import Request

from services.pipeline.content_handler import ContentHandler


def get_content_handler(request: Request) -> ContentHandler:
    """The handler built once in the app lifespan."""
    return request.app.state.content_handler
