from fastapi import Request

from photosearch.services.search_proxy import SearchProxy


def get_search_proxy(request: Request) -> SearchProxy:
    """Return the process-wide proxy created by the application lifespan."""
    return request.app.state.search_proxy
