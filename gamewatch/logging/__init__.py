"""Structured logging helpers.

Every module obtains its logger through ``get_logger(__name__, component=...)``
and passes an ``event`` name in ``extra`` so records can be filtered by event
regardless of the message text.
"""

import logging
from typing import Optional, Union


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """Adapter that stamps a ``component`` field on every record.

    Per-call ``extra`` fields are merged over the adapter's own fields, so a
    call may still override ``component`` when it needs to.
    """

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(
    name: str, component: Optional[str] = None
) -> Union[logging.Logger, ComponentLoggerAdapter]:
    """Return the named logger, wrapped so it carries ``component`` if given.

    Example:
        >>> logger = get_logger(__name__, component="release_sync")
        >>> logger.info("Feed fetched", extra={"event": "release_sync.feed.fetched"})
    """
    logger = logging.getLogger(name)
    if component:
        return ComponentLoggerAdapter(logger, {"component": component})
    return logger
