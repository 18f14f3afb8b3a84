from __future__ import annotations
import logging
from loguru import logger

# ---- stdlib logging -> loguru ----
class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())

def _hook_stdlib_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for noisy in ("uvicorn", "uvicorn.access", "aiohttp", "asyncio", "aiosqlite"):
        l = logging.getLogger(noisy)
        l.handlers = [InterceptHandler()]
        l.propagate = False

# extra is rendered so bound context (provider, query, page...) stays visible
LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level:<7}</level> | "
    "<cyan>{extra[name]}</cyan> | "
    "<cyan>{file}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level> {extra}"
)

def setup_logging(log_level: str = "INFO", *, colorize: bool = True) -> None:
    """
    Configure the loguru sink and absorb stdlib logging.

    Args:
        log_level: Minimum level name
        colorize: Emit ANSI colours on the console sink
    """
    logger.remove()
    logger.configure(extra={"name": "sentinel"})
    logger.add(
        sink=lambda m: print(m, end=""),
        format=LOG_FORMAT,
        colorize=colorize,
        backtrace=False,
        diagnose=False,
        level=log_level.upper(),
        enqueue=False,
    )
    _hook_stdlib_logging()

def get_logger(name: str = "sentinel", **ctx):
    """Return a logger bound to a component name and optional context."""
    return logger.bind(name=name, **ctx)
