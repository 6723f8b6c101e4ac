from __future__ import annotations

import logging

RULE_NAME = "azure-graph-api"
LOG_PREFIX = f"[rule] [{RULE_NAME}] "
LOG_FORMAT = LOG_PREFIX + "%(levelname)s %(name)s: %(message)s"

_PACKAGE_LOGGER = "graph_rule"


class _RuleHandler(logging.StreamHandler):
    """Marker type so repeated configuration does not stack handlers."""


def configure_rule_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the ``graph_rule`` logger hierarchy.

    Notes:
    - Stdlib logging only; the host owns the root logger.
    - Every line from this package is prefixed with ``[rule] [azure-graph-api]``
      so it can be picked out of the host's log stream.
    - Calling this more than once only updates the level.
    """

    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.setLevel(level.upper())

    if not any(isinstance(h, _RuleHandler) for h in logger.handlers):
        handler = _RuleHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
