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

from bases.Kernel import Singleton, getLogger

# Streaming read size for file bodies
CHUNK_SIZE = 4096

DEFAULT_HOST = 'localhost'
DEFAULT_PORT = 8000

# Shared secret for Basic authentication, "user:password" as a browser sends it
AUTH_ENV = 'AUTH'
AUTH_REALM = 'swiv'

DEFAULT_CONTENT_TYPE = 'application/octet-stream'

logger = getLogger(__name__)


# Singleton
class SettingsGetter(Singleton):

    @classmethod
    def getInstance(cls):
        if cls not in cls._instances:
            raise RuntimeError('Get SettingsGetter before initialized it.')
        return cls._instances[cls]

    def initialize(self, baseDir=None, authSecret=None, host=DEFAULT_HOST, port=DEFAULT_PORT):
        """Initialize the SettingsGetter with the gallery root and server options."""
        self._baseDir = os.path.abspath(baseDir or os.getcwd())
        self._authSecret = authSecret or ''
        self._host = host
        self._port = port

        logger.debug(f'Settings initialized: baseDir={self._baseDir}, auth={self.isAuthEnabled()}')

    @property
    def baseDir(self):
        return self._baseDir

    @property
    def authSecret(self):
        return self._authSecret

    @property
    def host(self):
        return self._host

    @property
    def port(self):
        return self._port

    def isAuthEnabled(self) -> bool:
        return bool(self._authSecret)
