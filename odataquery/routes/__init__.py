from .query_routes import router, filter_request_params

__all__ = ["router", "filter_request_params"]
