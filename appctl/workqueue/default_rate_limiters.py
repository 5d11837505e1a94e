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

import collections
import operator
import time


def default_controller_rate_limiter():
    # Per-item exponential backoff from 5ms to 1000s, and an overall token
    # bucket of 10 qps with a burst of 100
    return MaxOfRateLimiter(
        ItemExponentialFailureRateLimiter(0.005, 1000), BucketRateLimiter(10, 100)
    )


class BucketRateLimiter:
    def __init__(self, limit, burst, *, now=time.monotonic):
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")
        if burst < 1:
            raise ValueError(f"burst must be at least 1, got {burst}")
        self._limit = limit
        self._burst = burst
        self._now = now
        self._tokens = burst
        self._last = now()

    def when(self, item):
        now = self._now()
        tokens = self._advance(now) - 1
        self._last = now
        self._tokens = tokens
        return -tokens / self._limit if tokens < 0 else 0

    def forget(self, item):
        pass

    def num_requeues(self, item):
        return 0

    def _advance(self, now):
        elapsed = max(now - self._last, 0)
        return min(self._tokens + elapsed * self._limit, self._burst)


class ItemExponentialFailureRateLimiter:
    def __init__(self, base_delay, max_delay):
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._failures = collections.Counter()

    def when(self, item):
        exp = self._failures[item]
        self._failures[item] += 1

        # Anything past 2**62 is capped anyway; avoids float overflow
        if exp > 62:
            return self._max_delay
        return min(self._base_delay * 2 ** exp, self._max_delay)

    def forget(self, item):
        self._failures.pop(item, None)

    def num_requeues(self, item):
        return self._failures[item]


class MaxOfRateLimiter:
    def __init__(self, *limiters):
        self._limiters = limiters

    def when(self, item):
        return max(map(operator.methodcaller("when", item), self._limiters))

    def forget(self, item):
        for limiter in self._limiters:
            limiter.forget(item)

    def num_requeues(self, item):
        return max(map(operator.methodcaller("num_requeues", item), self._limiters))
