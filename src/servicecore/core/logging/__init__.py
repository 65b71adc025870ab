from .builder import make_dict_config, setup_logging
from .filters import RedactFilter, RequestIdFilter, get_request_id, reset_request_id, set_request_id
from .middleware import REQUEST_ID_HEADER, RequestIDMiddleware

__all__ = [
    "setup_logging",
    "make_dict_config",
    "set_request_id",
    "reset_request_id",
    "get_request_id",
    "RequestIdFilter",
    "RedactFilter",
    "RequestIDMiddleware",
    "REQUEST_ID_HEADER",
]
