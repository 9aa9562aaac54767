from .id_generator import generate_id, get_timestamp_ms
from .logging import get_logger, setup_logging

__all__ = [
    "generate_id",
    "get_logger",
    "setup_logging",
    "get_timestamp_ms",
]
