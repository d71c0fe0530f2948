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
Filesystem resolver for the gallery.

Classifies pathnames as Directory or File entries, lists and walks directories,
and streams file contents in fixed-size chunks:
- classify(): Directory, File or None when the path is absent or inaccessible
- listChildren(): immediate children of a directory, inaccessible ones dropped
- walk(): depth-first File leaves of a directory tree
- stream(): FileStream over the bytes of a file
- mimetype(): content type guessed from the pathname
"""

import os
import mimetypes

from dataclasses import dataclass
from typing import Iterator, List, Optional, Set, Tuple, Union

from bases.Kernel import getLogger
from bases.Paths import joinPath
from bases.Settings import CHUNK_SIZE, DEFAULT_CONTENT_TYPE
from bases.Utils import formatSize

logger = getLogger(__name__)


class FilesystemError(Exception):
    """Raised when a directory cannot be scanned"""
    pass


class FileOpenError(FilesystemError):
    """Raised when a file classified as File cannot be opened for reading"""
    pass


class CycleDetectedError(FilesystemError):
    """Raised when a walk would re-enter a directory it is already inside"""
    pass


@dataclass(frozen=True)
class Directory:
    pathname: str

    @property
    def basename(self) -> str:
        return os.path.basename(self.pathname.rstrip('/'))


@dataclass(frozen=True)
class File:
    pathname: str

    @property
    def basename(self) -> str:
        return os.path.basename(self.pathname)


Entry = Union[Directory, File]


def classify(pathname: str) -> Optional[Entry]:
    # Nonexistent and forbidden paths are both absent.
    if os.path.isdir(pathname):
        return Directory(pathname)
    elif os.path.isfile(pathname):
        return File(pathname)
    else:
        return None


def listChildren(pathname: str) -> List[Entry]:
    """
    List the immediate children of a directory as classified entries.

    Names are returned in ordinal order. Children that classify as absent
    (broken symlinks, entries we may not stat) are dropped.

    Raises:
        FilesystemError: If the directory itself cannot be scanned
    """
    try:
        names = sorted(os.listdir(pathname))
    except OSError as e:
        raise FilesystemError(f'Could not scan directory: {pathname}') from e

    entries = []
    for name in names:
        entry = classify(joinPath(pathname, name))
        if entry is not None:
            entries.append(entry)
    return entries


def _identity(pathname: str) -> Tuple[int, int]:
    try:
        st = os.stat(pathname)
    except OSError as e:
        raise FilesystemError(f'Could not stat directory: {pathname}') from e
    return st.st_dev, st.st_ino


def _walk(directory: Directory, ancestors: Set[Tuple[int, int]]) -> Iterator[File]:
    identity = _identity(directory.pathname)
    if identity in ancestors:
        raise CycleDetectedError(f'Directory cycle at {directory.pathname}')

    ancestors.add(identity)
    try:
        for entry in listChildren(directory.pathname):
            if isinstance(entry, Directory):
                yield from _walk(entry, ancestors)
            else:
                yield entry
    finally:
        ancestors.discard(identity)


def walk(directory: Directory) -> Iterator[File]:
    """
    Yield every File below directory, depth-first in listing order.

    Directories are recursed into and never yielded. Each call scans the
    filesystem again. Only the current descent path is tracked, so two sibling
    links to the same directory are both walked while a link back to an
    ancestor raises CycleDetectedError.
    """
    yield from _walk(directory, set())


class FileStream:
    """
    Forward-only sequence of byte chunks read from one file.

    At most size bytes are yielded, the length the file had when it was opened,
    so a Content-Length taken from size is never exceeded. A file that changes
    length while it is read is logged as a warning.

    The stream owns the file handle: it is opened on construction and released
    exactly once, on end of file, on a read error, or on close(). Use it as a
    context manager (or call close()) when the stream may be abandoned early.
    """

    def __init__(self, file: File, chunkSize=CHUNK_SIZE):
        self.file = file
        self.chunkSize = chunkSize

        try:
            self._handle = open(file.pathname, 'rb')
        except OSError as e:
            raise FileOpenError(f'Could not read file: {file.pathname}') from e

        self.size = os.fstat(self._handle.fileno()).st_size
        self._remaining = self.size
        logger.debug(f'Streaming {file.pathname} ({formatSize(self.size)})')

    @property
    def closed(self) -> bool:
        return self._handle is None

    def __iter__(self):
        return self

    def __next__(self) -> bytes:
        if self._handle is None:
            raise StopIteration

        try:
            if self._remaining:
                chunk = self._handle.read(min(self.chunkSize, self._remaining))
            else:
                chunk = b''
                if self._handle.read(1):
                    logger.warning(
                        f'{self.file.pathname} grew while streaming, only the first {formatSize(self.size)} were sent'
                    )
        except Exception:
            self.close()
            raise

        if not chunk:
            if self._remaining:
                logger.warning(
                    f'{self.file.pathname} shrank while streaming, '
                    f'{formatSize(self._remaining)} of {formatSize(self.size)} are missing'
                )
            self.close()
            raise StopIteration

        self._remaining -= len(chunk)
        return chunk

    def close(self):
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.close()

    def __enter__(self):
        return self

    def __exit__(self, excType, excValue, traceback):
        self.close()


def stream(file: File, chunkSize=CHUNK_SIZE) -> FileStream:
    """
    Open file for chunked reading.

    Raises:
        FileOpenError: If the file vanished or became unreadable since it was classified
    """
    return FileStream(file, chunkSize)


def mimetype(file: File) -> str:
    ctype, _ = mimetypes.guess_type(file.pathname)
    return ctype or DEFAULT_CONTENT_TYPE
