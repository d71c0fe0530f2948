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

import argparse
import json
import os
import logging
import logging.config

from bases.Kernel import PUBLIC_VERSION, LOG_LEVEL_MAPPING, getLogger, configureGlobalLogLevel
from bases.Settings import AUTH_ENV, DEFAULT_HOST, DEFAULT_PORT
from bases.Utils import flushPrint, getEnv

logger = getLogger(__name__)


def loadEnvFile(envFilePath='.env'):
    """
    Load environment variables from a .env file.
    Only sets variables that are not already defined in os.environ.

    Returns:
        int: Number of variables loaded
    """
    if not os.path.isfile(envFilePath):
        return 0

    loadedCount = 0
    with open(envFilePath, 'r', encoding='utf-8') as f:
        for lineNum, line in enumerate(f, 1):
            line = line.strip()

            # Skip empty lines and comments
            if not line or line.startswith('#'):
                continue

            if '=' not in line:
                logger.warning(f'.env line {lineNum}: Invalid format (missing =): {line}')
                continue

            key, _, value = line.partition('=')
            key = key.strip()
            value = value.strip()

            if not key:
                logger.warning(f'.env line {lineNum}: Empty key')
                continue

            # Remove quotes if present (both single and double)
            if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                value = value[1:-1]

            # Environment takes precedence
            if key not in os.environ:
                os.environ[key] = value
                loadedCount += 1
            else:
                logger.debug(f'.env: Skipped {key} (already set in environment)')

    logger.debug(f'Loaded {loadedCount} environment variables from {envFilePath}')
    return loadedCount


def configureLogging(logLevel):
    """Configure logging level from a level name or a JSON dictConfig file

    Priority order:
    1. logLevel parameter (from --log-level CLI argument)
    2. SWIV_LOGGING_LEVEL environment variable
    3. Default to None (no configuration change)
    """
    if logLevel is None:
        logLevel = getEnv('SWIV_LOGGING_LEVEL', None)

    if logLevel is None:
        return None

    if os.path.isfile(logLevel):
        try:
            with open(logLevel, 'r') as configFile:
                configDict = json.load(configFile)

            logging.config.dictConfig(configDict)
            logger.info(f"Logging configured from file: {logLevel}")
            return logLevel
        except (json.JSONDecodeError, ValueError, KeyError) as e:
            flushPrint(f"Failed to load logging config from {logLevel}: {e}")
            flushPrint("Falling back to default logging level configuration")

    if logLevel.upper() in LOG_LEVEL_MAPPING:
        configureGlobalLogLevel(LOG_LEVEL_MAPPING[logLevel.upper()])
        logger.info(f"Logging level set to {logLevel}")
    else:
        configureGlobalLogLevel(logging.WARNING)
        logger.warning(f"Invalid logging level '{logLevel}', using WARNING as default")

    return logLevel


def configureCLIParser():
    parser = argparse.ArgumentParser(prog='swiv', description='Serve a directory tree as a browsable image gallery.')

    parser.add_argument('--dir', default='.', help='Directory to serve (default: current directory)')
    parser.add_argument(
        '--auth',
        default=os.getenv(AUTH_ENV, ''),
        help=f'Basic auth secret as "user:password" (default: ${AUTH_ENV}, empty disables authentication)'
    )
    parser.add_argument(
        '--port',
        type=int,
        default=getEnv('SWIV_PORT', DEFAULT_PORT, int),
        help=f'Port to listen on (default: {DEFAULT_PORT})'
    )
    parser.add_argument('--host', default=DEFAULT_HOST, help=f'Address to bind (default: {DEFAULT_HOST})')
    parser.add_argument(
        '--log-level', dest='logLevel', default=None, help='DEBUG, INFO, WARNING, ERROR or a JSON logging config file'
    )
    parser.add_argument('--version', action='version', version=f'swiv v{PUBLIC_VERSION}')

    return parser
