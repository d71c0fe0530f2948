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
import unittest

from collections import Counter
from unittest.mock import MagicMock, patch

from bases.FileSystems import (
    Directory, File, CycleDetectedError, FileOpenError, FilesystemError, classify, listChildren, mimetype, stream,
    walk
)
from bases.Settings import CHUNK_SIZE

from ..GalleryTestBase import GalleryTestBase, canSymlink


class ClassifyTest(GalleryTestBase):

    def testDirectoryFileAndAbsent(self):
        self.makeGallery()
        self.assertEqual(classify(self.path('holiday')), Directory(self.path('holiday')))
        self.assertEqual(classify(self.path('a.png')), File(self.path('a.png')))
        self.assertIsNone(classify(self.path('missing.png')))

    @unittest.skipUnless(canSymlink, 'symlinks required')
    def testBrokenSymlinkIsAbsent(self):
        os.symlink(self.path('nowhere'), self.path('broken'))
        self.assertIsNone(classify(self.path('broken')))


class ListChildrenTest(GalleryTestBase):

    def testListsClassifiedChildrenInOrdinalOrder(self):
        self.makeGallery()
        entries = listChildren(self.base)

        self.assertEqual([os.path.basename(e.pathname) for e in entries],
                         ['a.png', 'b.jpg', 'empty', 'holiday', 'nested'])
        self.assertIsInstance(entries[0], File)
        self.assertIsInstance(entries[3], Directory)
        self.assertEqual(entries[3].pathname, self.base + '/holiday')

    def testTrailingSeparatorIsNotDuplicated(self):
        self.writeFile('x.png')
        self.assertEqual(listChildren(self.base + '/')[0].pathname, self.base + '/x.png')

    @unittest.skipUnless(canSymlink, 'symlinks required')
    def testDropsAbsentChildren(self):
        self.writeFile('x.png')
        os.symlink(self.path('nowhere'), self.path('broken'))
        self.assertEqual(listChildren(self.base), [File(self.base + '/x.png')])

    def testUnreadableDirectoryRaises(self):
        with patch('bases.FileSystems.os.listdir', side_effect=PermissionError('denied')):
            with self.assertRaises(FilesystemError) as ctx:
                listChildren(self.base)

        self.assertIsInstance(ctx.exception.__cause__, PermissionError)

    def testMissingDirectoryRaises(self):
        with self.assertRaises(FilesystemError):
            listChildren(self.path('missing'))


class WalkTest(GalleryTestBase):

    def testYieldsOnlyFilesDepthFirst(self):
        self.makeGallery()
        files = list(walk(Directory(self.base)))

        self.assertTrue(all(isinstance(f, File) for f in files))
        self.assertEqual([f.pathname[len(self.base):] for f in files], [
            '/a.png',
            '/b.jpg',
            '/holiday/1.png',
            '/holiday/2.png',
            '/holiday/beach/0.png',
        ])

    def testUnionOfSubdirectoryWalks(self):
        self.makeGallery()
        self.writeFile('nested/deeper/z.gif')
        root = Directory(self.base)

        expected = Counter()
        for entry in listChildren(self.base):
            if isinstance(entry, Directory):
                expected.update(walk(entry))
            else:
                expected[entry] += 1

        self.assertEqual(Counter(walk(root)), expected)

    def testWalkIsLazyAndRescans(self):
        self.writeFile('one.png')
        root = Directory(self.base)
        self.assertEqual(len(list(walk(root))), 1)

        self.writeFile('two.png')
        self.assertEqual(len(list(walk(root))), 2)

    def testEmptyTreeYieldsNothing(self):
        self.makeDir('a/b/c')
        self.assertEqual(list(walk(Directory(self.base))), [])

    @unittest.skipUnless(canSymlink, 'symlinks required')
    def testSymlinkLoopRaises(self):
        self.writeFile('loop/x.png')
        os.symlink(self.path('loop'), self.path('loop/again'))

        with self.assertRaises(CycleDetectedError):
            list(walk(Directory(self.base)))

    @unittest.skipUnless(canSymlink, 'symlinks required')
    def testSiblingLinksToSameDirectoryAreWalked(self):
        self.writeFile('real/x.png')
        os.symlink(self.path('real'), self.path('link1'))
        os.symlink(self.path('real'), self.path('link2'))

        names = sorted(f.pathname[len(self.base):] for f in walk(Directory(self.base)))
        self.assertEqual(names, ['/link1/x.png', '/link2/x.png', '/real/x.png'])


class StreamTest(GalleryTestBase):

    def testChunksReproduceContent(self):
        content = os.urandom(CHUNK_SIZE * 3 + 17)
        path = self.writeFile('blob.bin', content)

        with stream(File(path)) as chunks:
            parts = list(chunks)

        self.assertEqual(b''.join(parts), content)
        self.assertEqual([len(p) for p in parts], [CHUNK_SIZE, CHUNK_SIZE, CHUNK_SIZE, 17])

    def testEmptyFileYieldsNoChunks(self):
        path = self.writeFile('empty.bin', b'')
        chunks = stream(File(path))
        self.assertEqual(list(chunks), [])
        self.assertTrue(chunks.closed)

    def testHandleReleasedOnExhaustion(self):
        path = self.writeFile('small.bin', b'abc')
        chunks = stream(File(path))
        self.assertEqual(chunks.size, 3)
        self.assertFalse(chunks.closed)

        self.assertEqual(list(chunks), [b'abc'])
        self.assertTrue(chunks.closed)
        # Exhausted streams stay exhausted
        self.assertEqual(list(chunks), [])

    def testHandleReleasedOnEarlyClose(self):
        path = self.writeFile('big.bin', b'x' * (CHUNK_SIZE * 4))

        with stream(File(path)) as chunks:
            self.assertEqual(len(next(chunks)), CHUNK_SIZE)

        self.assertTrue(chunks.closed)
        chunks.close() # Idempotent
        self.assertEqual(list(chunks), [])

    def testRepeatedStreamingDoesNotLeakHandles(self):
        content = b'y' * (CHUNK_SIZE + 1)
        path = self.writeFile('repeat.bin', content)

        for _ in range(2000):
            chunks = stream(File(path))
            self.assertEqual(b''.join(chunks), content)
            self.assertTrue(chunks.closed)

    def testReadErrorReleasesHandle(self):
        path = self.writeFile('fail.bin', b'abc')
        chunks = stream(File(path))

        realHandle = chunks._handle
        failingHandle = MagicMock()
        failingHandle.read.side_effect = OSError('I/O error')
        chunks._handle = failingHandle
        realHandle.close()

        with self.assertRaises(OSError):
            next(chunks)

        self.assertTrue(chunks.closed)
        failingHandle.close.assert_called_once_with()

    def testGrowthAfterOpenIsNotSent(self):
        content = b'a' * (CHUNK_SIZE + 100)
        path = self.writeFile('growing.bin', content)
        chunks = stream(File(path))

        with open(path, 'ab') as f:
            f.write(b'b' * 50)

        with self.assertLogs('bases.FileSystems', level='WARNING') as captured:
            self.assertEqual(b''.join(chunks), content)

        self.assertEqual(chunks.size, len(content))
        self.assertTrue(chunks.closed)
        self.assertIn('grew while streaming', captured.output[0])

    def testShrinkAfterOpenIsLogged(self):
        path = self.writeFile('shrinking.bin', b'x' * (CHUNK_SIZE * 2))
        chunks = stream(File(path))

        with open(path, 'r+b') as f:
            f.truncate(CHUNK_SIZE + 10)

        with self.assertLogs('bases.FileSystems', level='WARNING') as captured:
            self.assertEqual(len(b''.join(chunks)), CHUNK_SIZE + 10)

        self.assertTrue(chunks.closed)
        self.assertIn('shrank while streaming', captured.output[0])
        self.assertIn('4.0 KiB', captured.output[0])

    def testMissingFileRaisesFileOpenError(self):
        with self.assertRaises(FileOpenError) as ctx:
            stream(File(self.path('vanished.png')))

        self.assertIsInstance(ctx.exception, FilesystemError)


class MimetypeTest(unittest.TestCase):

    def testKnownExtensions(self):
        self.assertEqual(mimetype(File('/x/a.png')), 'image/png')
        self.assertEqual(mimetype(File('/x/a.jpg')), 'image/jpeg')
        self.assertEqual(mimetype(File('/x/a.gif')), 'image/gif')

    def testUnknownFallsBackToOctetStream(self):
        self.assertEqual(mimetype(File('/x/noextension')), 'application/octet-stream')
        self.assertEqual(mimetype(File('/x/a.unknownext')), 'application/octet-stream')


if __name__ == '__main__':
    unittest.main()
