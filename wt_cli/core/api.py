"""Workout tracker REST API client with retry and rate limiting."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from wt_cli.core.constants import (
    DEFAULT_BASE_URL,
    RETRYABLE_STATUS_CODES,
    TRAINING_PLANS_PATH,
    WORKOUTS_PATH,
)
from wt_cli.core.models import TrainingPlan, ValidationError, Workout

logger = logging.getLogger(__name__)


class APIError(RuntimeError):
    """Raised for API failures after retries."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NetworkError(APIError):
    """Raised when the server could not be reached at all."""


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or "request failed"
    if isinstance(body, dict):
        return str(body.get("error") or body.get("message") or body)
    return str(body)


class WorkoutTrackerAPI:
    """Thin wrapper around the workout tracker REST API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: str = "",
        rate_limit_delay: float = 0.0,
        max_retries: int = 3,
        timeout_seconds: int = 30,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.rate_limit_delay = rate_limit_delay
        self.max_retries = max_retries
        self.timeout_seconds = timeout_seconds
        self._has_sent_request = False

    @property
    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Cookie"] = f"token={self.token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        last_error: Optional[Exception] = None
        unreachable = False

        for attempt in range(1, self.max_retries + 1):
            try:
                if self.rate_limit_delay > 0 and self._has_sent_request:
                    time.sleep(self.rate_limit_delay)

                self._has_sent_request = True
                logger.debug("%s %s (attempt %d)", method, path, attempt)
                response = requests.request(
                    method=method,
                    url=url,
                    headers=self._headers,
                    params=params,
                    json=json_data,
                    timeout=self.timeout_seconds,
                )
                if 400 <= response.status_code < 500 and response.status_code not in RETRYABLE_STATUS_CODES:
                    raise APIError(
                        f"API request failed for {method} {path}: {_error_message(response)}",
                        status_code=response.status_code,
                    )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(response.text, response=response)
                response.raise_for_status()

                if not response.text:
                    return {}
                return response.json()
            except (requests.ConnectionError, requests.Timeout) as exc:
                last_error = exc
                unreachable = True
            except (requests.RequestException, ValueError) as exc:
                last_error = exc
                unreachable = False

            logger.debug("%s %s failed: %s", method, path, last_error)
            if attempt >= self.max_retries:
                break
            time.sleep(min(2**attempt, 8))

        message = f"API request failed for {method} {path}: {last_error}"
        if unreachable:
            raise NetworkError(message)
        status = getattr(getattr(last_error, "response", None), "status_code", None)
        raise APIError(message, status_code=status)

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("GET", path, params=params)

    def post(self, path: str, payload: Dict[str, Any]) -> Any:
        return self._request("POST", path, json_data=payload)

    def put(self, path: str, payload: Dict[str, Any]) -> Any:
        return self._request("PUT", path, json_data=payload)

    def delete(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("DELETE", path, params=params)

    def probe(self, path: str = WORKOUTS_PATH, timeout: float = 5) -> bool:
        """Return True when the server answers at all, whatever the status."""
        try:
            requests.head(f"{self.base_url}{path}", headers=self._headers, timeout=timeout)
        except requests.RequestException as exc:
            logger.debug("Connectivity probe failed: %s", exc)
            return False
        return True

    def get_workouts(self, plan_id: Optional[str] = None) -> List[Workout]:
        params: Dict[str, Any] = {"t": int(time.time() * 1000)}
        if plan_id:
            params["planId"] = plan_id
        data = self.get(WORKOUTS_PATH, params=params)
        if not isinstance(data, dict) or not isinstance(data.get("workouts"), list):
            raise ValidationError("Unexpected response from GET /api/workouts: missing 'workouts'")
        return [Workout.from_api(item) for item in data["workouts"]]

    def create_workout(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        result = self.post(WORKOUTS_PATH, payload)
        return result if isinstance(result, dict) else {}

    def update_workout(self, workout_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        result = self.put(WORKOUTS_PATH, {"workoutId": workout_id, **payload})
        return result if isinstance(result, dict) else {}

    def delete_workout(self, workout_id: str) -> Any:
        return self.delete(WORKOUTS_PATH, params={"id": workout_id})

    def get_training_plans(self, active_only: bool = False) -> List[TrainingPlan]:
        params = {"active": "true"} if active_only else None
        data = self.get(TRAINING_PLANS_PATH, params=params)
        if not isinstance(data, dict) or not isinstance(data.get("plans"), list):
            raise ValidationError("Unexpected response from GET /api/training-plans: missing 'plans'")
        return [TrainingPlan.from_api(item) for item in data["plans"]]

    def create_training_plan(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        result = self.post(TRAINING_PLANS_PATH, payload)
        return result if isinstance(result, dict) else {}

    def update_training_plan(self, plan_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        result = self.put(TRAINING_PLANS_PATH, {"planId": plan_id, **payload})
        return result if isinstance(result, dict) else {}

    def delete_training_plan(self, plan_id: str) -> Any:
        return self.delete(TRAINING_PLANS_PATH, params={"id": plan_id})
