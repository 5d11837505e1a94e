# Copyright 2015 The Kubernetes Authors.
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

import asyncio
import collections
import logging

from appctl.util import clock

logger = logging.getLogger(__name__)


def new(name=""):
    return Type(clock.RealClock(), name=name)


class Type:
    def __init__(self, c, *, name=""):
        self.name = name
        self._clock = c
        # Items that need processing; a superset of the items in `_queue`
        self._dirty = set()
        self._processing = set()
        self._queue = collections.deque()
        self._cond = asyncio.Condition()
        self._shutting_down = False

    def __len__(self):
        return len(self._queue)

    async def add(self, item):
        async with self._cond:
            if self._shutting_down:
                return
            if item in self._dirty:
                return
            self._dirty.add(item)
            if item in self._processing:
                return
            self._queue.append(item)
            self._cond.notify()

    async def get(self):
        async with self._cond:
            while not self._queue and not self._shutting_down:
                await self._cond.wait()
            if self._shutting_down:
                return None, True
            item = self._queue.popleft()
            self._processing.add(item)
            self._dirty.discard(item)
            return item, False

    async def done(self, item):
        async with self._cond:
            self._processing.discard(item)
            if item in self._dirty and not self._shutting_down:
                self._queue.append(item)
                self._cond.notify()

    async def shut_down(self):
        async with self._cond:
            if not self._shutting_down:
                logger.debug("Shutting down queue %r", self.name)
            self._shutting_down = True
            self._cond.notify_all()

    def shutting_down(self):
        return self._shutting_down
