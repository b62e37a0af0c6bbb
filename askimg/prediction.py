"""Replicate prediction wire types: the request we POST and the job object we poll."""
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Optional

from askimg.config import Config
from askimg.constants import MODEL_VERSION


class PredictionStatus(str, Enum):
    UNKNOWN = "unknown"
    STARTING = "starting"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @classmethod
    def parse(cls, raw: Any) -> "PredictionStatus":
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class PredictionInput:
    image: str
    caption: bool
    question: str
    context: str
    use_nucleus_sampling: bool
    temperature: int


@dataclass(frozen=True)
class PredictionRequest:
    version: str
    input: PredictionInput

    @classmethod
    def from_config(cls, config: Config) -> "PredictionRequest":
        """Validates ``config`` and builds the BLIP-2 request from it."""
        cfg = config.validated()
        return cls(
            version=MODEL_VERSION,
            input=PredictionInput(
                image=cfg.image,
                caption=cfg.caption,
                question=cfg.question,
                context=cfg.context,
                use_nucleus_sampling=cfg.use_nucleus_sampling,
                temperature=cfg.temperature,
            ),
        )

    def to_json(self) -> dict[str, Any]:
        return asdict(self)


def _text(raw: Any) -> str:
    match raw:
        case None:
            return ""
        case str():
            return raw
        # streaming models return a list of tokens
        case list():
            return "".join(map(str, raw))
        case _:
            return str(raw)


def _optional_text(raw: Any) -> Optional[str]:
    return _text(raw) or None


@dataclass(frozen=True)
class Prediction:
    """One snapshot of a prediction. Terminal once completed_at is set."""

    id: str
    status: PredictionStatus
    output: str = ""
    error: str = ""
    logs: str = ""
    created_at: Optional[str] = None
    completed_at: Optional[str] = None
    get_url: str = ""
    cancel_url: str = ""
    predict_time: Optional[float] = None

    @property
    def is_terminal(self) -> bool:
        return bool(self.completed_at)

    @classmethod
    def from_json(cls, data: Any) -> "Prediction":
        """Decode a Replicate job object. Raises ValueError when it isn't one."""
        match data:
            case dict():
                pass
            case _:
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")

        urls = data.get("urls") or {}
        metrics = data.get("metrics") or {}
        match (urls, metrics):
            case (dict(), dict()):
                pass
            case _:
                raise ValueError("urls and metrics must be JSON objects")

        predict_time = metrics.get("predict_time")
        return cls(
            id=_text(data.get("id")),
            status=PredictionStatus.parse(data.get("status")),
            output=_text(data.get("output")),
            error=_text(data.get("error")),
            logs=_text(data.get("logs")),
            created_at=_optional_text(data.get("created_at")),
            completed_at=_optional_text(data.get("completed_at")),
            get_url=_text(urls.get("get")),
            cancel_url=_text(urls.get("cancel")),
            predict_time=float(predict_time) if isinstance(predict_time, (int, float)) else None,
        )
