#!/usr/bin/env python
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0
#
# swiv - Simple web image viewer
# Copyright (C) 2025-2026 swiv contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import base64
import hmac

from dataclasses import dataclass, field
from typing import Dict, Mapping, Union
from urllib.parse import parse_qs, unquote

from bases.Kernel import getLogger
from bases.FileSystems import Directory, File, FileStream, classify, mimetype, stream
from bases.Paths import isContained
from bases.Settings import AUTH_REALM
from bases.Views import GalleryView, ImageView

logger = getLogger(__name__)


@dataclass(frozen=True)
class Response:
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Union[str, FileStream] = ''

    @property
    def isStream(self) -> bool:
        return isinstance(self.body, FileStream)


class Request:
    """Read-only view of an inbound request: decoded path, query lookup and header lookup."""

    def __init__(self, target: str, headers: Mapping[str, str] = None):
        # A leading '//' belongs to the path, never a network location
        path, _, query = target.partition('#')[0].partition('?')
        self._pathname = unquote(path, errors='surrogateescape')
        self._query = parse_qs(query)
        self._headers = headers or {}

    def pathname(self) -> str:
        return self._pathname

    def get(self, key: str) -> str:
        return self._query.get(key, [''])[0]

    def header(self, key: str) -> str:
        return self._headers.get(key) or ''


# =============================================================================
# Respondable Exception Classes
# =============================================================================


class RespondableError(Exception):
    """Base exception for errors that carry their own client-facing response"""

    statusCode = 500
    message = 'Internal server error'

    def getHeaders(self) -> Dict[str, str]:
        return {'Content-Type': 'text/plain'}

    def getResponse(self) -> Response:
        return Response(self.statusCode, self.getHeaders(), self.message)


class BadRequest(RespondableError):
    """Raised when the request path resolves to neither a directory nor a file (400)"""
    statusCode = 400
    message = 'Bad request'


class Unauthorized(RespondableError):
    """Raised when the Authorization header does not match the configured secret (401)"""
    statusCode = 401
    message = 'Unauthorized'

    def getHeaders(self) -> Dict[str, str]:
        headers = super().getHeaders()
        headers['WWW-Authenticate'] = f'Basic realm="{AUTH_REALM}"'
        return headers


class Router:
    """
    Turns a Request into exactly one Response.

    Args:
        base: Gallery root; request paths are appended to it
        authSecret: Shared secret for Basic authentication, empty disables it
    """

    def __init__(self, base: str, authSecret: str = ''):
        self.base = base.rstrip('/') or '/'
        self.authSecret = authSecret or ''

    def route(self, request: Request) -> Response:
        try:
            self.authenticate(request)

            entry = self.resolve(request.pathname())
            if isinstance(entry, Directory):
                mode = request.get('mode')
                view = ImageView(self.base) if mode == 'viewer' else GalleryView(self.base)
                return Response(200, {'Content-Type': 'text/html'}, view.render(entry))
            elif isinstance(entry, File):
                return Response(200, {'Content-Type': mimetype(entry)}, stream(entry))
            else:
                raise BadRequest()
        except RespondableError as e:
            return e.getResponse()
        except Exception as e:
            logger.exception(f'Failed to route {request.pathname()!r}: {e}')
            return Response(500, {'Content-Type': 'text/plain'}, 'Internal server error')

    def authenticate(self, request: Request):
        if not self.authSecret:
            return

        expected = 'Basic ' + base64.b64encode(self.authSecret.encode('utf-8')).decode('ascii')
        actual = request.header('Authorization')

        if not hmac.compare_digest(expected.encode('utf-8'), actual.encode('utf-8', 'surrogateescape')):
            logger.warning('Authentication failed: Authorization header mismatch')
            raise Unauthorized()

    def resolve(self, pathname: str):
        """Classify base + pathname, treating anything outside the base as absent."""
        if self.base == '/':
            target = pathname or '/'
        else:
            target = self.base + pathname

        if not isContained(self.base, target):
            logger.warning(f'Rejected path outside base directory: {pathname!r}')
            return None

        return classify(target)
