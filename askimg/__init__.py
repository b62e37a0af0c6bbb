"""askimg — ask a question about an image with BLIP-2 on Replicate."""
from askimg.config import Config
from askimg.errors import (
    AskImgError,
    DeadlineExceededError,
    InvalidConfigError,
    PollError,
    SubmissionError,
)
from askimg.prediction import Prediction, PredictionRequest, PredictionStatus
from askimg.replicate import ReplicateClient, ask

__all__ = [
    "AskImgError",
    "Config",
    "DeadlineExceededError",
    "InvalidConfigError",
    "PollError",
    "Prediction",
    "PredictionRequest",
    "PredictionStatus",
    "ReplicateClient",
    "SubmissionError",
    "ask",
]
