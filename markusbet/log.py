import json
import logging

logger = logging.getLogger("markusbet")


def _render(msg, ctx):
    return f"{msg} {json.dumps(ctx, ensure_ascii=False, default=str)}" if ctx else msg


def log_info(msg, **ctx):
    logger.info(_render(msg, ctx))


def log_err(msg, **ctx):
    logger.error(_render(msg, ctx))
