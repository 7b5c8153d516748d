from .general_utils import log, handle_error, get_logger

__all__ = ['log', 'handle_error', 'get_logger']
