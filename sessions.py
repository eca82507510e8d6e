from dataclasses import dataclass
from typing import Optional

from itsdangerous import BadData, URLSafeTimedSerializer
from starlette.requests import Request

from config import Settings, get_settings


@dataclass(frozen=True)
class Principal:
    user_id: str


def _serializer(settings: Settings) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(settings.session_secret, salt="ledger-session")


def issue_session_token(user_id: str, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    return _serializer(settings).dumps({"u": user_id})


class PrincipalResolver:
    """Turns a signed session token into the requesting principal.

    The token is read from a bearer Authorization header first, then from
    the session cookie. Query parameters are never consulted.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()

    def _token(self, request: Request) -> Optional[str]:
        header = request.headers.get("Authorization", "")
        scheme, _, credentials = header.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
        return request.cookies.get(self.settings.session_cookie) or None

    def resolve(self, request: Request) -> Optional[Principal]:
        token = self._token(request)
        if not token:
            return None
        try:
            data = _serializer(self.settings).loads(
                token, max_age=self.settings.session_max_age_hours * 3600
            )
        except BadData:
            return None

        user_id = data.get("u") if isinstance(data, dict) else None
        if not isinstance(user_id, str) or not user_id:
            return None
        return Principal(user_id=user_id)
