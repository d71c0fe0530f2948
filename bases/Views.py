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

import html
import os

from typing import List
from urllib.parse import quote

from bases.FileSystems import Directory, File, listChildren, walk
from bases.Paths import SEPARATOR, relativeTo

LAYOUT_TEMPLATE = """<!doctype html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>swiv</title>
<style>{{ style }}</style>
</head>
<body>{{ body }}</body>
</html>"""

GALLERY_STYLE = """
html { background: black; color: white; overflow: hidden; font-family: sans-serif; }
body { margin: 0; display: flex; flex-direction: column; flex-wrap: wrap; height: 100vh; overflow-x: scroll; scrollbar-width: none; }
article { overflow-wrap: anywhere; height: 25vh; width: 25vh; position: relative; overflow: hidden; }
a { color: inherit; text-decoration: inherit; cursor: pointer; }
article img { width: 100%; height: 100%; object-fit: cover; }
article label { position: absolute; left: 0; right: 0; bottom: 0; padding: 0.5em; background: #0008; }
nav { position: absolute; bottom: 1em; right: 1em; background: orange; z-index: 1000; border-radius: 0.5em; }
nav a { display: block; padding: 1em; }
"""

IMAGE_STYLE = """
html { background: black; color: white; overflow: hidden; }
body { margin: 0; display: flex; height: 100vh; overflow-x: scroll; scrollbar-width: none; scroll-snap-type: x proximity; max-width: fit-content; }
img { height: 100vh; width: 100vw; object-fit: contain; scroll-snap-align: center; }
"""

NAVBAR = '<nav><a href="?mode=viewer">&#128065;</a></nav>'


def collectFiles(directory: Directory) -> List[File]:
    """All files below directory at any depth, in ordinal pathname order."""
    return sorted(walk(directory), key=lambda file: file.pathname)


class View:
    """Base for renderers turning a Directory into a complete HTML document."""

    STYLE = ''

    def __init__(self, base: str):
        self.base = base

    def render(self, directory: Directory) -> str:
        raise NotImplementedError

    def link(self, pathname: str) -> str:
        url = relativeTo(self.base, pathname)
        if not url.startswith(SEPARATOR):
            # Serving the filesystem root strips the leading separator
            url = SEPARATOR + url

        # Quoted from the raw name bytes so the router's unquote() gives back the same
        # pathname, including names that are not valid UTF-8
        return html.escape(quote(os.fsencode(url)), quote=True)

    def label(self, text: str) -> str:
        return html.escape(os.fsencode(text).decode('utf-8', 'replace'))

    def layout(self, body: str) -> str:
        return LAYOUT_TEMPLATE.replace('{{ style }}', self.STYLE).replace('{{ body }}', body)


class GalleryView(View):
    """One tile per immediate child; subdirectories show their first image and file count."""

    STYLE = GALLERY_STYLE

    def render(self, directory: Directory) -> str:
        tiles = ''.join(self._renderEntry(entry) for entry in listChildren(directory.pathname))
        return self.layout(NAVBAR + tiles)

    def _renderEntry(self, entry) -> str:
        if isinstance(entry, Directory):
            return self._renderDirectory(entry)
        return self._renderFile(entry)

    def _renderDirectory(self, directory: Directory) -> str:
        files = collectFiles(directory)
        if not files:
            return ''

        label = self.label(f'{directory.basename} ({len(files)})')
        return (
            '<article>'
            f'<a href="{self.link(directory.pathname)}">'
            f'<img src="{self.link(files[0].pathname)}" loading="lazy">'
            f'<label>{label}</label>'
            '</a>'
            '</article>'
        )

    def _renderFile(self, file: File) -> str:
        return f'<article><img src="{self.link(file.pathname)}" loading="lazy"></article>'


class ImageView(View):
    """Every file below the directory as a full-screen, swipeable strip."""

    STYLE = IMAGE_STYLE

    def render(self, directory: Directory) -> str:
        body = ''.join(f'<img src="{self.link(file.pathname)}" loading="lazy">' for file in collectFiles(directory))
        return self.layout(body)
