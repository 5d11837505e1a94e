# Copyright 2016 The Kubernetes Authors.
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
import heapq
import itertools

from appctl.util import clock
from appctl.workqueue import queue


def new(name=""):
    return _DelayingType(clock.RealClock(), name=name)


class _DelayingType(queue.Type):
    def __init__(self, c, *, name=""):
        super().__init__(c, name=name)
        self._waiting = _WaitForPriorityQueue()
        self._waiting_changed = asyncio.Event()
        self._stop_event = asyncio.Event()
        self._waiting_task = asyncio.ensure_future(self._waiting_loop())

    async def add_after(self, item, duration):
        if self.shutting_down():
            return

        if duration <= 0:
            await self.add(item)
            return

        self._waiting.insert(item, self._clock.now() + duration)
        self._waiting_changed.set()

    async def shut_down(self):
        if self._stop_event.is_set():
            return
        self._stop_event.set()
        await super().shut_down()
        await asyncio.gather(self._waiting_task, return_exceptions=True)

    async def _waiting_loop(self):
        stop_task = asyncio.ensure_future(self._stop_event.wait())
        try:
            while not self._stop_event.is_set():
                now = self._clock.now()
                while len(self._waiting) and self._waiting.peek_priority() <= now:
                    await self.add(self._waiting.pop())

                self._waiting_changed.clear()
                aws = [stop_task, asyncio.ensure_future(self._waiting_changed.wait())]
                timer = None
                if len(self._waiting):
                    timer = self._clock.new_timer(self._waiting.peek_priority() - now)
                    aws.append(asyncio.ensure_future(timer.c().get()))

                _, pending = await asyncio.wait(
                    aws, return_when=asyncio.FIRST_COMPLETED
                )
                if timer:
                    timer.stop()
                pending.discard(stop_task)
                for task in pending:
                    task.cancel()
                await asyncio.gather(*pending, return_exceptions=True)
        finally:
            stop_task.cancel()


class _WaitForPriorityQueue:
    _REMOVED = object()

    def __init__(self):
        self._pq = []
        self._entry_finder = {}
        self._counter = itertools.count()

    def __len__(self):
        return len(self._entry_finder)

    def insert(self, data, ready_at):
        entry = self._entry_finder.get(data)
        if entry is not None:
            if entry[0] <= ready_at:
                return
            entry[-1] = self._REMOVED
        entry = [ready_at, next(self._counter), data]
        self._entry_finder[data] = entry
        heapq.heappush(self._pq, entry)

    def peek_priority(self):
        while self._pq:
            ready_at, _, data = self._pq[0]
            if data is not self._REMOVED:
                return ready_at
            heapq.heappop(self._pq)
        raise KeyError("peek from an empty priority queue")

    def pop(self):
        while self._pq:
            _, _, data = heapq.heappop(self._pq)
            if data is not self._REMOVED:
                del self._entry_finder[data]
                return data
        raise KeyError("pop from an empty priority queue")
