from venturescope.api.v1 import api_router, get_api_router

__all__ = ["api_router", "get_api_router"]
