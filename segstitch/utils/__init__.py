from .logger import configure_logging, get_logger
from .time_format import format_time, to_seconds
