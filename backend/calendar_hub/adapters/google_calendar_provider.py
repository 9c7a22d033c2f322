from __future__ import annotations
from typing import Dict, Any, List, Optional
from googleapiclient.discovery import build
from google.oauth2 import service_account

from ..ports.calendar_provider import CalendarProvider

SCOPES = ['https://www.googleapis.com/auth/calendar.readonly']


class GoogleCalendarProvider(CalendarProvider):
    """Reads public or shared calendars through the Calendar API v3.

    A fresh service object is built per call: the underlying httplib2
    transport is not thread-safe and fetches run on worker threads.
    """

    def __init__(self, api_key: Optional[str] = None, service_account_file: Optional[str] = None):
        self._api_key = api_key or None
        self._credentials = None
        if service_account_file:
            self._credentials = service_account.Credentials.from_service_account_file(
                service_account_file, scopes=SCOPES
            )

    def _service(self):
        if self._credentials is not None:
            return build('calendar', 'v3', credentials=self._credentials, cache_discovery=False)
        return build('calendar', 'v3', developerKey=self._api_key, cache_discovery=False)

    def list_events(
        self,
        calendar_id: str,
        time_min: str,
        time_max: str,
        max_results: int,
    ) -> List[Dict[str, Any]]:
        req = self._service().events().list(
            calendarId=calendar_id,
            timeMin=time_min,
            timeMax=time_max,
            maxResults=max_results,
            singleEvents=True,
            orderBy='startTime',
        )
        res = req.execute()
        return res.get('items', []) or []
