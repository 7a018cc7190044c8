import functools
import logging

logger = logging.getLogger(__name__)


def log_call(fn):
    @functools.wraps(fn)
    def __wrapped(*args, **kwargs):
        logger.debug(f"Calling {fn.__qualname__} {_brief(args)} {_brief(kwargs)}")
        return fn(*args, **kwargs)
    return __wrapped


def _brief(value, limit: int = 120) -> str:
    # Templates are whole documents; keep the log line readable
    text = repr(value)
    return text if len(text) <= limit else text[: limit - 3] + "..."
