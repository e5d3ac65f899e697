"""Request-aware logging suppression middleware."""

import logging
import threading


_thread_local = threading.local()


class _NoisyPathFilter(logging.Filter):
    """Filter that hides low-level logs for polled endpoints."""

    noisy_paths = ('/api/dashboard/', '/healthz')

    def filter(self, record: logging.LogRecord) -> bool:
        path = getattr(_thread_local, "path", "")
        if any(p in path for p in self.noisy_paths):
            return record.levelno >= logging.WARNING
        return True


class SuppressJsonLogMiddleware:
    """Suppress store chatter logged while serving dashboard polls."""

    def __init__(self, get_response):
        self.get_response = get_response
        noisy = _NoisyPathFilter()
        for name in ("django.server", "finance.utils.supabase_rest"):
            logging.getLogger(name).addFilter(noisy)

    def __call__(self, request):
        _thread_local.path = request.path
        try:
            return self.get_response(request)
        finally:
            try:
                del _thread_local.path
            except AttributeError:
                pass
