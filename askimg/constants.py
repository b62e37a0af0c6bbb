"""All magic values live here — no inline literals anywhere else."""

# Replicate prediction API
PREDICTIONS_URL = "https://api.replicate.com/v1/predictions"
AUTH_SCHEME = "Token"
CONTENT_TYPE_JSON = "application/json"

# Version for model https://replicate.com/andreasjansson/blip-2
MODEL_VERSION = "4b32258c42e9efd4288bb9910bc532a69727f9acd26aa08e175713a0a857a608"

# Per-request HTTP timeout (seconds). The overall deadline is Config.timeout.
HTTP_TIMEOUT_SECONDS: float = 10.0

# Fixed wait before every poll of urls.get (seconds).
POLL_INTERVAL_SECONDS: float = 0.5

DEFAULT_TEMPERATURE = 1

# CLI
PROG_NAME = "askimg"
ENV_PREFIX = "ASKIMG_"
DEFAULT_TIMEOUT = "30s"
DEFAULT_LOG_LEVEL = "WARNING"
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

# Log / user-facing messages
MSG_SUBMITTING = "Submitting prediction (caption=%s)"
MSG_SUBMITTED = "Prediction %s created (%s)"
MSG_STATUS_CHANGED = "Prediction %s: %s → %s"
MSG_COMPLETED = "Prediction %s %s (predict_time=%s)"
MSG_TERMINAL_FAILURE = "Prediction %s ended %s: %s"
MSG_BAD_STATUS = "Replicate responded %d: %s"
MSG_BAD_BODY = "Undecodable response from Replicate: %s"
MSG_INTERRUPTED = "Interrupted"
MSG_FAILED = "askimg failed: %s"

# Error messages
ERR_TOKEN_REQUIRED = "token is required"
ERR_IMAGE_REQUIRED = "image is required"
ERR_NO_RESULT_URL = "response has no urls.get"
