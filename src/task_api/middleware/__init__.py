from task_api.middleware.cors import CORSHeadersMiddleware
from task_api.middleware.request_logging import RequestLoggingMiddleware


__all__ = ["CORSHeadersMiddleware", "RequestLoggingMiddleware"]
