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
"""
Pathname helpers shared by the resolver and the views.

Pathnames are plain strings built from the gallery root, so the helpers work on
strings and never touch the filesystem, except isContained() which resolves
symlinks to decide whether a request stays inside the root.
"""

import os

SEPARATOR = '/'


def relativeTo(base: str, pathname: str) -> str:
    """
    Strip base from the front of pathname.

    No normalization is performed, so this must not be used as a security check.

    Returns:
        str: The suffix after base, or pathname unchanged if it does not start with base
    """
    if pathname.startswith(base):
        return pathname[len(base):]
    return pathname


def joinPath(a: str, b: str) -> str:
    """Join two segments with exactly one separator between them."""
    if a.endswith(SEPARATOR) and b.startswith(SEPARATOR):
        return a + b[1:]
    if a.endswith(SEPARATOR) or b.startswith(SEPARATOR):
        return a + b
    return a + SEPARATOR + b


def isContained(base: str, pathname: str) -> bool:
    """
    Check that pathname, after resolving '.', '..' and symlinks, is base or lies below it.
    """
    if '\x00' in base or '\x00' in pathname:
        return False

    realBase = os.path.realpath(base)
    realPath = os.path.realpath(pathname)

    try:
        return os.path.commonpath([realBase, realPath]) == realBase
    except ValueError:
        # Different drives on Windows
        return False
