"""Config — immutable ask settings, and the flag/env/YAML loader that produces them."""
import logging
import math
import os
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dotenv import load_dotenv

from askimg.constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT,
    ENV_PREFIX,
    ERR_IMAGE_REQUIRED,
    ERR_TOKEN_REQUIRED,
)
from askimg.errors import InvalidConfigError

logger = logging.getLogger(__name__)

OPTION_KEYS = (
    "token",
    "image",
    "question",
    "context",
    "temperature",
    "nucleus",
    "timeout",
    "log_level",
)

_DURATION = re.compile(r"(?:\d+(?:\.\d+)?(?:ms|s|m|h))+")
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}
_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class Config:
    token: str
    image: str
    question: str = ""
    context: str = ""
    temperature: int = DEFAULT_TEMPERATURE
    use_nucleus_sampling: bool = False
    timeout: Optional[float] = None

    @property
    def caption(self) -> bool:
        """Captioning mode: no question, the model describes the image."""
        return not self.question

    @property
    def deadline(self) -> Optional[float]:
        match self.timeout:
            case float() | int() as t if t > 0:
                return float(t)
            case _:
                return None

    def validated(self) -> "Config":
        """Return a copy safe to submit. Raises InvalidConfigError on missing token or image."""
        match (self.token, self.image):
            case (token, _) if not token:
                raise InvalidConfigError(ERR_TOKEN_REQUIRED)
            case (_, image) if not image:
                raise InvalidConfigError(ERR_IMAGE_REQUIRED)
            case _:
                pass

        match self.temperature:
            case t if t > 0:
                return self
            case _:
                return replace(self, temperature=DEFAULT_TEMPERATURE)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "Config":
        """Build from merged option values; unset options take their defaults."""
        timeout = options.get("timeout")
        return cls(
            token=str(options.get("token") or ""),
            image=str(options.get("image") or ""),
            question=str(options.get("question") or ""),
            context=str(options.get("context") or ""),
            temperature=parse_int("temperature", options.get("temperature"), DEFAULT_TEMPERATURE),
            use_nucleus_sampling=parse_bool("nucleus", options.get("nucleus"), False),
            timeout=parse_duration(DEFAULT_TIMEOUT if timeout is None else timeout),
        )


# ── option parsing ────────────────────────────────────────────────────────────


def parse_duration(raw: Any) -> Optional[float]:
    """Seconds from '500ms', '30s', '1m30s', '2h' or a bare number. None means no deadline."""
    match raw:
        case None:
            return None
        case bool():
            raise InvalidConfigError(f"invalid duration: {raw!r}")
        case int() | float():
            seconds = float(raw)
        case str():
            text = raw.strip()
            negative = text.startswith("-")
            text = text.lstrip("+-")
            try:
                seconds = float(text)
            except ValueError:
                if not _DURATION.fullmatch(text):
                    raise InvalidConfigError(f"invalid duration: {raw!r}") from None
                seconds = sum(
                    float(amount) * _UNIT_SECONDS[unit]
                    for amount, unit in _DURATION_PART.findall(text)
                )
            seconds = -seconds if negative else seconds
        case _:
            raise InvalidConfigError(f"invalid duration: {raw!r}")
    if not math.isfinite(seconds):
        raise InvalidConfigError(f"invalid duration: {raw!r}")
    return seconds if seconds > 0 else None


def parse_bool(name: str, raw: Any, default: bool) -> bool:
    match raw:
        case None:
            return default
        case bool():
            return raw
        case str() if raw.strip().lower() in _TRUE:
            return True
        case str() if raw.strip().lower() in _FALSE:
            return False
        case _:
            raise InvalidConfigError(f"invalid {name}: {raw!r}")


def parse_int(name: str, raw: Any, default: int) -> int:
    match raw:
        case None:
            return default
        case bool():
            raise InvalidConfigError(f"invalid {name}: {raw!r}")
        case float() if not raw.is_integer():
            raise InvalidConfigError(f"invalid {name}: {raw!r}")
        case _:
            try:
                return int(raw)
            except (TypeError, ValueError) as exc:
                raise InvalidConfigError(f"invalid {name}: {raw!r}") from exc


# ── sources ───────────────────────────────────────────────────────────────────


def read_config_file(path: str) -> dict[str, Any]:
    """Load a YAML mapping of option values. Dashed keys are accepted (log-level)."""
    try:
        raw = yaml.safe_load(Path(path).read_text())
    except (OSError, yaml.YAMLError) as exc:
        raise InvalidConfigError(f"couldn't read config file {path}: {exc}") from exc

    match raw:
        case None:
            return {}
        case dict():
            return {str(k).replace("-", "_"): v for k, v in raw.items()}
        case _:
            raise InvalidConfigError(f"config file {path} must contain a mapping")


def env_name(key: str) -> str:
    return ENV_PREFIX + key.upper()


def load_options(
    flags: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> dict[str, Any]:
    """Merge option values: flag > ASKIMG_* environment > YAML config file.

    When ``environ`` is omitted the process environment is used, after loading
    a ``.env`` file from the working directory.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    config_path = flags.get("config") or environ.get(env_name("config")) or None
    file_values = read_config_file(config_path) if config_path else {}
    if config_path:
        logger.debug("Loaded config file %s", config_path)

    def first_set(key: str) -> Any:
        candidates = (flags.get(key), environ.get(env_name(key)) or None, file_values.get(key))
        return next((v for v in candidates if v is not None), None)

    options = {key: first_set(key) for key in OPTION_KEYS}
    options["log_level"] = options["log_level"] or DEFAULT_LOG_LEVEL
    return options
