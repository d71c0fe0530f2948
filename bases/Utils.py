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

import bitmath

from bases.Kernel import getLogger

logger = getLogger(__name__)


def flushPrint(text):
    try:
        print(text, flush=True)
    except UnicodeEncodeError as e:
        # Fallback for terminals that don't support certain characters
        logger.debug(f"UnicodeEncodeError during print, using fallback encoding: {e}, {sys.stdout.encoding=}")

        buf = getattr(sys.stdout, "buffer", None)
        if buf is not None:
            buf.write(text.encode("utf-8", errors="replace"))
            buf.write(b"\n")
            buf.flush()
            return

        print(''.join(ch if ch.isprintable() else '?' for ch in text), flush=True)


def formatSize(size):
    """Human-readable byte count for log lines, e.g. '512 B' or '4.0 KiB'."""
    if size < bitmath.KiB(1).bytes:
        return f'{size} B'

    return bitmath.Byte(size).best_prefix(system=bitmath.NIST).format('{value:.1f} {unit}')


def getEnv(name, default, cast=str):
    """
    Read an environment variable, converted with cast.

    Unset or empty variables give default. A value cast cannot convert is logged
    and also gives default.
    """
    value = os.environ.get(name)
    if not value:
        return default

    try:
        return cast(value)
    except ValueError:
        logger.warning(f'Ignoring {name}={value!r}, expected {cast.__name__}')
        return default
