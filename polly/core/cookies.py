"""Request-scoped cookie bookkeeping.

Guards and the identity provider never touch the response directly. They
queue cookie writes on a CookieJar bound to the request, and the session
middleware copies the queue onto whatever response the endpoint produced.
Reads through the jar see pending writes, so a token rotated earlier in the
same request is the one later checks compare against.
"""
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from starlette.responses import Response


@dataclass
class CookieWrite:
    name: str
    value: str
    max_age: Optional[int] = None
    path: str = "/"
    httponly: bool = True
    secure: bool = False
    samesite: str = "lax"
    delete: bool = False


class CookieJar:
    def __init__(self, incoming: Optional[Mapping[str, str]] = None):
        self._incoming: Dict[str, str] = dict(incoming or {})
        self._pending: Dict[str, CookieWrite] = {}

    def get(self, name: str) -> Optional[str]:
        if name in self._pending:
            write = self._pending[name]
            return None if write.delete else write.value
        return self._incoming.get(name)

    def set(
        self,
        name: str,
        value: str,
        *,
        max_age: Optional[int] = None,
        path: str = "/",
        httponly: bool = True,
        secure: bool = False,
        samesite: str = "lax",
    ) -> None:
        self._pending[name] = CookieWrite(
            name=name,
            value=value,
            max_age=max_age,
            path=path,
            httponly=httponly,
            secure=secure,
            samesite=samesite,
        )

    def delete(self, name: str, path: str = "/") -> None:
        self._pending[name] = CookieWrite(name=name, value="", path=path, delete=True)

    @property
    def pending(self) -> List[CookieWrite]:
        return list(self._pending.values())

    def apply(self, response: Response) -> None:
        """Forward every queued write onto the outgoing response."""
        for write in self._pending.values():
            if write.delete:
                response.delete_cookie(key=write.name, path=write.path)
                continue
            response.set_cookie(
                key=write.name,
                value=write.value,
                max_age=write.max_age,
                path=write.path,
                httponly=write.httponly,
                secure=write.secure,
                samesite=write.samesite,
            )
