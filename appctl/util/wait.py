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
import random

FOREVER_TEST_TIMEOUT = 30


class WaitTimeoutError(Exception):
    pass


async def until(f, period, stop_event):
    await jitter_until(f, period, 0, stop_event)


# Sliding: the period starts after `f` returns
async def jitter_until(f, period, jitter_factor, stop_event):
    while not stop_event.is_set():
        await f()
        if jitter_factor > 0:
            delay = jitter(period, jitter_factor)
        else:
            delay = period
        if await wait_or_stop(delay, stop_event):
            return


def jitter(duration, max_factor):
    if max_factor <= 0:
        max_factor = 1
    return duration + random.random() * max_factor * duration


async def poll(interval, timeout, condition):
    try:
        await asyncio.wait_for(_poll_infinite(interval, condition), timeout)
    except asyncio.TimeoutError:
        raise WaitTimeoutError


async def poll_immediate(interval, timeout, condition):
    if await _check(condition):
        return
    await poll(interval, timeout, condition)


async def poll_immediate_until(interval, condition, stop_event):
    while True:
        if await _check(condition):
            return
        if await wait_or_stop(interval, stop_event):
            raise WaitTimeoutError


async def wait_or_stop(delay, stop_event):
    """Sleep for `delay` seconds; returns True if `stop_event` was set first."""
    try:
        await asyncio.wait_for(stop_event.wait(), delay)
    except asyncio.TimeoutError:
        return False
    return True


async def _poll_infinite(interval, condition):
    while True:
        await asyncio.sleep(interval)
        if await _check(condition):
            return


async def _check(condition):
    result = condition()
    if asyncio.iscoroutine(result):
        result = await result
    return result
