# Copyright 2014 The Kubernetes Authors.
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
import logging

logger = logging.getLogger(__name__)


class EventType:
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    BOOKMARK = "BOOKMARK"
    ERROR = "ERROR"


class FakeWatcher:
    _STOP = object()

    def __init__(self):
        self._result = asyncio.Queue()
        self._stopped = False
        self._drained = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._drained:
            raise StopAsyncIteration
        event = await self._result.get()
        if event is self._STOP:
            self._drained = True
            raise StopAsyncIteration
        return event

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        self.stop()

    def stop(self):
        if not self._stopped:
            logger.debug("Stopping fake watcher.")
            self._stopped = True
            self._result.put_nowait(self._STOP)

    def is_stopped(self):
        return self._stopped

    def add(self, obj):
        self.action(EventType.ADDED, obj)

    def modify(self, obj):
        self.action(EventType.MODIFIED, obj)

    def delete(self, obj):
        self.action(EventType.DELETED, obj)

    def error(self, obj):
        self.action(EventType.ERROR, obj)

    def action(self, action, obj):
        if not self._stopped:
            self._result.put_nowait({"type": action, "object": obj})
