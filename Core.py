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

from bases.Kernel import getLogger
from bases.Settings import SettingsGetter
from bases.Server import createServer
from bases.CLI import configureCLIParser, configureLogging, loadEnvFile
from bases.Utils import flushPrint

logger = getLogger(__name__)


def main(argv=None):
    # Load .env file early, before defaults are taken from the environment
    loadEnvFile()

    parser = configureCLIParser()
    args = parser.parse_args(argv)

    configureLogging(args.logLevel)

    if not os.path.isdir(args.dir):
        flushPrint(f'Error: {args.dir} is not a directory')
        return 2

    os.chdir(args.dir)

    settingsGetter = SettingsGetter(baseDir=os.getcwd(), authSecret=args.auth, host=args.host, port=args.port)

    try:
        server = createServer(
            settingsGetter.port, settingsGetter.baseDir, settingsGetter.authSecret, host=settingsGetter.host
        )
    except OSError as e:
        logger.exception(e)
        flushPrint(f'Unable to listen on {settingsGetter.host}:{settingsGetter.port}: {e}')
        return 1

    with server:
        flushPrint(f'Serving {settingsGetter.baseDir}')
        flushPrint(f'Open {server.url}')
        if settingsGetter.isAuthEnabled():
            flushPrint('Basic authentication is enabled')
        flushPrint('Press Ctrl+C to stop.')

        try:
            server.serve_forever()
        except KeyboardInterrupt:
            flushPrint('\nShutting down...')

    return 0


if __name__ == '__main__':
    sys.exit(main())
