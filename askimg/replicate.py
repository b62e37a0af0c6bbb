"""ReplicateClient — submits a BLIP-2 prediction and polls it until completed_at is set."""
import asyncio
import logging
from typing import Optional

import httpx

from askimg.config import Config
from askimg.constants import (
    AUTH_SCHEME,
    CONTENT_TYPE_JSON,
    ERR_NO_RESULT_URL,
    HTTP_TIMEOUT_SECONDS,
    MSG_BAD_BODY,
    MSG_BAD_STATUS,
    MSG_COMPLETED,
    MSG_STATUS_CHANGED,
    MSG_SUBMITTED,
    MSG_SUBMITTING,
    MSG_TERMINAL_FAILURE,
    POLL_INTERVAL_SECONDS,
    PREDICTIONS_URL,
)
from askimg.errors import DeadlineExceededError, PollError, SubmissionError
from askimg.prediction import Prediction, PredictionRequest, PredictionStatus

logger = logging.getLogger(__name__)

_REQUEST_ERRORS = (httpx.HTTPError, httpx.InvalidURL)
_FAILED_STATUSES = (PredictionStatus.FAILED, PredictionStatus.CANCELED)


# ── pure helpers (module-level so tests can import them directly) ──────────────


def auth_headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"{AUTH_SCHEME} {token}",
        "Content-Type": CONTENT_TYPE_JSON,
    }


def _decode(
    response: httpx.Response,
    error_cls: type[SubmissionError] | type[PollError],
) -> Prediction:
    match response.is_success:
        case True:
            pass
        case False:
            logger.warning(MSG_BAD_STATUS, response.status_code, response.text)
            raise error_cls(
                f"status code not ok: {response.status_code}", response.status_code
            )

    try:
        return Prediction.from_json(response.json())
    except ValueError as exc:
        logger.warning(MSG_BAD_BODY, response.text)
        raise error_cls(
            f"couldn't decode response: {exc}", response.status_code
        ) from exc


# ── client ────────────────────────────────────────────────────────────────────


class ReplicateClient:
    """One POST to create the prediction, then sequential GETs until it is terminal."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        predictions_url: str = PREDICTIONS_URL,
    ) -> None:
        self._http = http
        self._poll_interval = poll_interval
        self._predictions_url = predictions_url

    async def submit(self, config: Config) -> Prediction:
        """Create the prediction. The returned snapshot carries the urls.get to poll."""
        request = PredictionRequest.from_config(config)
        logger.info(MSG_SUBMITTING, request.input.caption)

        try:
            response = await self._http.post(
                self._predictions_url,
                json=request.to_json(),
                headers=auth_headers(config.token),
            )
        except _REQUEST_ERRORS as exc:
            raise SubmissionError(f"couldn't do request: {exc}") from exc

        prediction = _decode(response, SubmissionError)
        match prediction.get_url:
            case "":
                raise SubmissionError(ERR_NO_RESULT_URL, response.status_code)
            case _:
                pass

        logger.info(MSG_SUBMITTED, prediction.id, prediction.status.value)
        return prediction

    async def wait(self, token: str, prediction: Prediction) -> str:
        """Poll until completed_at is set and return the output.

        The output is returned whatever the terminal status; a failed or
        canceled prediction is only logged.
        """
        url = prediction.get_url
        headers = auth_headers(token)
        current = prediction

        while not current.is_terminal:
            await asyncio.sleep(self._poll_interval)

            if not url:
                raise PollError(ERR_NO_RESULT_URL)
            try:
                response = await self._http.get(url, headers=headers)
            except _REQUEST_ERRORS as exc:
                raise PollError(f"couldn't do request: {exc}") from exc

            latest = _decode(response, PollError)
            if latest.status != current.status:
                logger.debug(
                    MSG_STATUS_CHANGED, latest.id, current.status.value, latest.status.value
                )
            current = latest

        logger.info(MSG_COMPLETED, current.id, current.status.value, current.predict_time)
        if current.status in _FAILED_STATUSES or current.error:
            logger.warning(
                MSG_TERMINAL_FAILURE, current.id, current.status.value, current.error or "-"
            )
        return current.output


async def ask(
    config: Config,
    *,
    http: Optional[httpx.AsyncClient] = None,
    poll_interval: float = POLL_INTERVAL_SECONDS,
) -> str:
    """Ask a question about (or caption) an image and wait for the answer.

    Raises InvalidConfigError before any request, SubmissionError or PollError
    for HTTP failures and DeadlineExceededError once ``config.timeout`` expires.
    Task cancellation propagates as asyncio.CancelledError.
    """
    cfg = config.validated()

    async def run(client: httpx.AsyncClient) -> str:
        replicate = ReplicateClient(client, poll_interval=poll_interval)
        prediction = await replicate.submit(cfg)
        return await replicate.wait(cfg.token, prediction)

    async def run_with_http() -> str:
        match http:
            case None:
                async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS) as client:
                    return await run(client)
            case client:
                return await run(client)

    match cfg.deadline:
        case None:
            return await run_with_http()
        case seconds:
            try:
                return await asyncio.wait_for(run_with_http(), timeout=seconds)
            except asyncio.TimeoutError as exc:
                raise DeadlineExceededError(f"no result after {seconds:g}s") from exc
