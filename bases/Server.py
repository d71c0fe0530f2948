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

import os
import sys

from contextlib import closing, nullcontext
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

from bases.Kernel import PUBLIC_VERSION, getLogger
from bases.Router import Request, Response, Router
from bases.Settings import DEFAULT_HOST

logger = getLogger(__name__)

DISCONNECT_ERRORS = (ConnectionResetError, ConnectionAbortedError, ConnectionError, BrokenPipeError)


class GalleryHandler(BaseHTTPRequestHandler):

    server_version = f'swiv/{PUBLIC_VERSION}'

    def _route(self) -> Response:
        request = Request(self.path, self.headers)
        return self.server.router.route(request)

    def _sendHeaders(self, response: Response):
        if response.isStream:
            length = response.body.size
        else:
            length = len(response.body.encode('utf-8'))

        self.send_response(response.status)
        for key, value in response.headers.items():
            self.send_header(key, value)
        self.send_header('Content-Length', str(length))
        self.end_headers()

    def _writeBody(self, response: Response):
        if not response.isStream:
            self.wfile.write(response.body.encode('utf-8'))
            return

        for chunk in response.body:
            self.wfile.write(chunk)

    def do_GET(self):
        response = self._route()

        # The stream owns a file handle, release it on every exit path.
        with closing(response.body) if response.isStream else nullcontext():
            try:
                self._sendHeaders(response)
                self._writeBody(response)
            except DISCONNECT_ERRORS as e:
                logger.info(f'Client {self.address_string()} disconnected during {self.path!r}: {e}')
            except OSError as e:
                logger.exception(f'Failed to write response for {self.path!r}: {e}')

    def do_HEAD(self):
        response = self._route()

        if response.isStream:
            response.body.close()

        try:
            self._sendHeaders(response)
        except DISCONNECT_ERRORS as e:
            logger.info(f'Client {self.address_string()} disconnected during {self.path!r}: {e}')

    def log_message(self, format, *args):
        logger.info(f'{self.address_string()} - {format % args}')


class Server(ThreadingHTTPServer):

    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, directory, serverAddress, authSecret=None, requestHandlerClass=None):
        self.directory = os.path.abspath(directory)
        self.authSecret = authSecret or ''
        self.router = Router(self.directory, self.authSecret)

        if requestHandlerClass is None:
            requestHandlerClass = GalleryHandler

        super().__init__(serverAddress, requestHandlerClass)

    @property
    def url(self):
        host, port = self.server_address[:2]
        return f'http://{host}:{port}/'

    def handle_error(self, request, client_address):
        logger.exception(f'Error while handling request from {client_address}: {sys.exception()}')


def createServer(port, directory, authSecret=None, host=DEFAULT_HOST, handlerClass=None):
    # Factory function to create a Server instance with specified handler
    return Server(directory, (host, port), authSecret, handlerClass)
