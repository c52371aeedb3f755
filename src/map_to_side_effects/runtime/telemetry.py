"""Logging for registrations, clears and dispatch, on top of telelog.

The logger is configured from ``MAP_TO_SIDE_EFFECTS_*`` environment
variables the first time it is needed. ``span`` wraps a registry operation
in a telelog profile and component; ``record_event`` logs lifecycle
milestones (``action.set_up``, ``action.cleared``, ``registry.reset``).
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, MutableMapping, Optional, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "MAP_TO_SIDE_EFFECTS_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "map_to_side_effects")

_LOGGER_CACHE: MutableMapping[str, Any] = {}
# Context values currently pushed on each logger, so nested spans can put
# back what an enclosing span set for the same key.
_CONTEXT: Dict[str, Dict[str, str]] = {}
_ACTIVE_CONFIG: Optional[Any] = None


def _env(name: str) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}")


def _env_flag(name: str) -> bool:
    return (_env(name) or "").lower() in {"1", "true", "yes", "on"}


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, set, frozenset)):
        return repr(value)
    return str(value)


def _config_from_env() -> Any:
    config = tl.Config()
    # Registrations happen at editor startup; stay quiet unless asked.
    config.with_min_level((_env("LOG_LEVEL") or "WARNING").upper())

    # Stdout is the RPC channel when running as a Neovim remote plugin.
    console = not _env_flag("DISABLE_CONSOLE")
    config.with_console_output(console)
    if console:
        config.with_colored_output(not _env_flag("NO_COLOR"))
    if _env_flag("LOG_JSON"):
        config.with_json_format(True)

    log_file = _env("LOG_FILE")
    if log_file:
        config.with_file_output(log_file)
    if _env_flag("LOG_BUFFERED"):
        config.with_buffering(True)
        config.with_buffer_size(int(_env("LOG_BUFFER_SIZE") or "2048"))
    if _env_flag("PROFILE"):
        config.with_profiling(True)
    return config


def configure(config: Optional[Any] = None) -> None:
    """Adopt ``config`` (a ``telelog.Config``), or re-read the environment."""

    global _ACTIVE_CONFIG
    _ACTIVE_CONFIG = config if config is not None else _config_from_env()
    _LOGGER_CACHE.clear()
    _CONTEXT.clear()


def get_logger(name: Optional[str] = None) -> Any:
    """Return the cached telelog logger called ``name``."""

    global _ACTIVE_CONFIG
    logger_name = name or DEFAULT_LOGGER_NAME
    if logger_name not in _LOGGER_CACHE:
        if _ACTIVE_CONFIG is None:
            _ACTIVE_CONFIG = _config_from_env()
        _LOGGER_CACHE[logger_name] = tl.Logger.with_config(
            logger_name, _ACTIVE_CONFIG
        )
    return _LOGGER_CACHE[logger_name]


def _log(log: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    with_data = getattr(log, f"{level}_with", None)
    if with_data is not None:
        with_data(message, [(str(k), _stringify(v)) for k, v in payload.items()])
    else:
        getattr(log, level)(f"{message} {payload}")


def record_event(
    name: str,
    *,
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    payload = {"event": name, **(data or {})}
    _log(get_logger(logger_name), "info", f"event::{name}", payload)


@dataclass
class SpanHandle:
    """Yielded by ``span``; collects metadata reported if the block fails."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def fail(self, reason: str) -> None:
        payload: Dict[str, Any] = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        payload["reason"] = reason
        _log(self.logger, "error", "span::fail", payload)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile the block as ``name`` with ``metadata`` as logger context.

    Context keys the block shadows are restored on exit, so spans nest.
    """

    log = get_logger(logger_name)
    active = _CONTEXT.setdefault(logger_name or DEFAULT_LOGGER_NAME, {})
    pushed = {key: _stringify(value) for key, value in (metadata or {}).items()}
    shadowed: Dict[str, Optional[str]] = {key: active.get(key) for key in pushed}
    for key, value in pushed.items():
        log.add_context(key, value)
        active[key] = value

    handle = SpanHandle(
        logger=log, span_name=name, component_name=component, metadata=dict(pushed)
    )
    try:
        with ExitStack() as stack:
            if component:
                stack.enter_context(log.track_component(component))
            stack.enter_context(log.profile(name))
            yield handle
    except Exception as exc:
        handle.fail(str(exc))
        raise
    finally:
        for key, previous in shadowed.items():
            if previous is None:
                log.remove_context(key)
                active.pop(key, None)
            else:
                log.add_context(key, previous)
                active[key] = previous


__all__ = ["SpanHandle", "configure", "get_logger", "record_event", "span"]
