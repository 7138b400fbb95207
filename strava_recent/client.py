import logging
from typing import Any

import requests

from .auth import StravaAuth
from .errors import DecodeError, NoTokenError, TransportError
from .utils import read_json_response

logger = logging.getLogger(__name__)


class StravaClient:
	"""Reads the athlete's recent activities with the token held by ``auth``.

	The client never authorizes or refreshes on its own: ``auth.initialize()``
	must have succeeded first, and a 401 is reported like any other failure.
	"""

	ACTIVITIES_URL = "https://www.strava.com/api/v3/athlete/activities"

	def __init__(self, auth: StravaAuth) -> None:
		self.auth = auth

	def get_activities(self, limit: int) -> list[dict[str, Any]]:
		token = self.auth.token
		if token is None:
			raise NoTokenError()

		try:
			resp = requests.get(
				self.ACTIVITIES_URL,
				headers={"Authorization": f"Bearer {token.access_token}"},
				params={"per_page": limit},
				timeout=self.auth.config.http_timeout,
			)
		except requests.RequestException as exc:
			raise TransportError(f"activity request failed: {exc}") from exc

		activities = read_json_response(resp, "API request")
		if not isinstance(activities, list) or not all(isinstance(a, dict) for a in activities):
			raise DecodeError("expected a JSON array of activity objects")
		logger.info("Fetched %d activities (per_page=%d)", len(activities), limit)
		return activities
