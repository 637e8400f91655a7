"""
Python client for the MediCore API.

The signed-in user lives in an explicit :class:`SessionContext` (a small
JSON file) rather than in process-wide state, so several sessions can
coexist and tests can point one at a temporary directory::

    session = SessionContext(Path('~/.medicore/session.json').expanduser())
    api = MediCoreClient('http://localhost:8000/api', session)
    api.login('admin@medicore.com', 'password')
    patients, page = api.get_page('/patients', params={'status': 'Active'})
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class ApiError(Exception):
    """A non-success envelope (or an unreadable response)."""

    def __init__(self, status: int, message: str, errors: Optional[list] = None):
        self.status = status
        self.message = message
        self.errors = errors or []
        super().__init__(f'{status}: {message}')


def summarize_errors(message: str, errors: Optional[list]) -> str:
    """``Validation failed: email: Enter a valid email address.; age: ...``"""
    details = [f"{e.get('field')}: {e.get('message')}" for e in errors or [] if isinstance(e, dict)]
    return f"{message}: {'; '.join(details)}" if details else message


class SessionContext:
    """The current user record and its bearer token, persisted as JSON."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Optional[dict]:
        try:
            with self.path.open('r', encoding='utf-8') as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            logger.warning('Ignoring unreadable session file %s', self.path)
            return None
        return data if isinstance(data, dict) else None

    def save(self, user: dict, token: str) -> dict:
        record = dict(user, token=token)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + '.tmp')
        with tmp.open('w', encoding='utf-8') as fh:
            json.dump(record, fh)
        os.replace(tmp, self.path)
        return record

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass

    @property
    def user(self) -> Optional[dict]:
        return self.load()

    @property
    def token(self) -> Optional[str]:
        record = self.load()
        return record.get('token') if record else None

    @property
    def role(self) -> Optional[str]:
        record = self.load()
        return record.get('role') if record else None


class MediCoreClient:
    def __init__(self, base_url: str, session: SessionContext, timeout: float = DEFAULT_TIMEOUT,
                 http: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.session = session
        self.timeout = timeout
        self.http = http or requests.Session()

    def _headers(self) -> dict:
        headers = {'Accept': 'application/json'}
        token = self.session.token
        if token:
            headers['Authorization'] = f'Bearer {token}'
        return headers

    def request(self, method: str, path: str, **kwargs) -> dict:
        """Send a request and return the parsed envelope; raise :class:`ApiError` otherwise."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        resp = self.http.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
        try:
            body = resp.json()
        except ValueError:
            raise ApiError(resp.status_code, f'Unexpected response from {method} {path}')
        if resp.status_code >= 400 or not body.get('success'):
            message = body.get('message') or resp.reason or 'Request failed'
            errors = body.get('errors')
            logger.debug('%s %s -> %s %s', method, path, resp.status_code, message)
            raise ApiError(resp.status_code, summarize_errors(message, errors), errors)
        return body

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        return self.request('GET', path, params=params).get('data')

    def get_page(self, path: str, params: Optional[dict] = None) -> tuple[list, dict]:
        body = self.request('GET', path, params=params)
        return body.get('data') or [], body.get('pagination') or {}

    def post(self, path: str, data: Optional[dict] = None, files: Optional[dict] = None) -> Any:
        if files:
            return self.request('POST', path, data=data, files=files).get('data')
        return self.request('POST', path, json=data).get('data')

    def put(self, path: str, data: Optional[dict] = None) -> Any:
        return self.request('PUT', path, json=data).get('data')

    def patch(self, path: str, data: Optional[dict] = None) -> Any:
        return self.request('PATCH', path, json=data).get('data')

    def delete(self, path: str) -> Any:
        return self.request('DELETE', path).get('data')

    def login(self, email: str, password: str) -> dict:
        data = self.post('/auth/login', {'email': email, 'password': password})
        return self.session.save(data['user'], data['token'])

    def register(self, **fields) -> dict:
        data = self.post('/auth/register', fields)
        return self.session.save(data['user'], data['token'])

    def logout(self) -> None:
        try:
            if self.session.token:
                self.post('/auth/logout')
        finally:
            self.session.clear()
