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
import logging
import threading

# Error reporting is disabled unless SENTRY_DSN is present in the environment.
import sentry_sdk

from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.atexit import AtexitIntegration

PUBLIC_VERSION = '1.0.0'

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

# Map string levels to logging constants for standard level names
LOG_LEVEL_MAPPING = {'DEBUG': logging.DEBUG, 'INFO': logging.INFO, 'WARNING': logging.WARNING, 'ERROR': logging.ERROR}

_sentryLock = threading.Lock()


def configureGlobalLogLevel(logLevel):
    """
    Configure the global logging level for the application.
    This affects all loggers created via getLogger().

    Args:
        logLevel: Logging level (logging.DEBUG, logging.INFO, etc.)
    """
    rootLogger = logging.getLogger()
    rootLogger.setLevel(logLevel)

    formatter = logging.Formatter(LOG_FORMAT)

    # Add console handler if none exists
    if not rootLogger.handlers:
        consoleHandler = logging.StreamHandler()
        consoleHandler.setLevel(logLevel)
        consoleHandler.setFormatter(formatter)
        rootLogger.addHandler(consoleHandler)
    else:
        # Update existing handlers
        for handler in rootLogger.handlers:
            if isinstance(handler, logging.StreamHandler):
                handler.setLevel(logLevel)
                handler.setFormatter(formatter)


if os.getenv('SWIV_LOGGING_LEVEL', '').upper() in LOG_LEVEL_MAPPING:
    configureGlobalLogLevel(LOG_LEVEL_MAPPING[os.environ['SWIV_LOGGING_LEVEL'].upper()])


def initializeSentry(dsn=None, version=PUBLIC_VERSION):
    """
    Initialize Sentry once per process when a DSN is available.

    Args:
        dsn: Sentry DSN, falls back to the SENTRY_DSN environment variable
        version: Release version reported with events

    Returns:
        bool: True if Sentry is active after the call
    """
    dsn = dsn or os.getenv('SENTRY_DSN')
    if not dsn:
        return False

    with _sentryLock:
        if sentry_sdk.get_client().is_active():
            return True

        sentry_sdk.init(
            dsn=dsn,
            release=f'swiv@{version}',
            default_integrations=False,
            integrations=[
                # Records at ERROR and above become events, the rest are breadcrumbs.
                LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
                # Suppress "sentry is attempting to send pending events..." on exit
                AtexitIntegration(callback=lambda pending, timeout: None),
            ],
        )

    return True


def getLogger(name, version=PUBLIC_VERSION):
    """
    Get a logger carrying the application version, with Sentry reporting when configured.

    Args:
        name: Logger name
        version: Version string for logging context
    """
    try:
        if initializeSentry(version=version):
            logging.getLogger(__name__).debug('Sentry error reporting enabled')
    except Exception as e:
        # If Sentry setup fails, continue with standard logging
        logging.getLogger(name).warning(f"Failed to initialize Sentry: {e}")

    return logging.LoggerAdapter(logging.getLogger(name), {'version': version or 'unknown'})


class Singleton:
    """
    Thread-safe singleton base class that can be inherited by other classes.
    Provides the standard singleton pattern with thread safety and getInstance() method.
    Uses template method pattern where subclasses override initialize() for custom initialization.
    """

    _instances = {}
    _lock = threading.Lock()

    def __new__(cls, *args, **kwargs):
        if cls not in cls._instances:
            with cls._lock:
                if cls not in cls._instances:
                    cls._instances[cls] = super().__new__(cls)
        return cls._instances[cls]

    def __init__(self, *args, **kwargs):
        """
        Only calls initialize() once for the lifetime of the singleton.
        Passes all arguments to the initialize method.
        """
        if not hasattr(self, '_initialized'):
            self.initialize(*args, **kwargs)
            self._initialized = True

    def initialize(self, *args, **kwargs):
        """
        Template method for subclasses to override for custom initialization.
        """
        pass

    @classmethod
    def getInstance(cls):
        """
        Static access method for the singleton instance.
        """
        if cls not in cls._instances:
            cls()
        return cls._instances[cls]

    @classmethod
    def reset(cls):
        """Drop the instance so the next construction initializes again."""
        with cls._lock:
            cls._instances.pop(cls, None)
