from __future__ import annotations

import logging


def log_event(
    logger: logging.Logger, message: str, *, level: int = logging.INFO, **fields: object
) -> None:
    """Emit a stable, grep-friendly structured log line.

    Key fields are appended as ``k=v`` tokens so plain-text log sinks stay searchable.
    Fields that are ``None`` or blank are left out.
    """

    tokens = [
        f"{key}={text}"
        for key, text in ((key, str(value).strip()) for key, value in fields.items() if value is not None)
        if text
    ]
    if tokens:
        logger.log(level, "%s %s", message, " ".join(tokens))
    else:
        logger.log(level, "%s", message)
