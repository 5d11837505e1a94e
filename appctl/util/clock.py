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
import time


class RealClock:
    def now(self):
        return time.time()

    def since(self, ts):
        return time.time() - ts

    def new_timer(self, d):
        return _RealTimer(d)


class FakeClock:
    def __init__(self, t):
        self._lock = asyncio.Lock()
        self._time = t
        self._waiters = []

    def now(self):
        return self._time

    def since(self, ts):
        return self._time - ts

    def new_timer(self, d):
        waiter = _FakeClockWaiter(self._time + d)
        self._waiters.append(waiter)
        return _FakeTimer(self, waiter)

    async def step(self, d):
        async with self._lock:
            self._set_time_locked(self._time + d)

    async def set_time(self, t):
        async with self._lock:
            self._set_time_locked(t)

    def has_waiters(self):
        return bool(self._waiters)

    def _set_time_locked(self, t):
        self._time = t
        pending = []
        for w in self._waiters:
            if w.target_time <= t:
                if not w.dest_queue.full():
                    w.dest_queue.put_nowait(t)
            else:
                pending.append(w)
        self._waiters = pending


class _RealTimer:
    def __init__(self, d):
        self._queue = asyncio.Queue(maxsize=1)
        self._handle = asyncio.get_running_loop().call_later(
            max(d, 0), self._fire
        )

    def c(self):
        return self._queue

    def stop(self):
        self._handle.cancel()

    def _fire(self):
        if not self._queue.full():
            self._queue.put_nowait(time.time())


class _FakeClockWaiter:
    def __init__(self, target_time):
        self.target_time = target_time
        self.dest_queue = asyncio.Queue(maxsize=1)


class _FakeTimer:
    def __init__(self, fake_clock, waiter):
        self._fake_clock = fake_clock
        self._waiter = waiter

    def c(self):
        return self._waiter.dest_queue

    def stop(self):
        waiters = self._fake_clock._waiters
        if self._waiter in waiters:
            waiters.remove(self._waiter)
            return True
        return False
