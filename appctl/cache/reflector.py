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
import random

from appctl.api import meta
from appctl.util import clock, wait
from appctl.watch import watch

logger = logging.getLogger(__name__)


class WatchError(Exception):
    pass


class Reflector:
    def __init__(self, lw, expected_type, store, *, name=None, period=1):
        self._store = store
        self._lister_watcher = lw
        self._expected_type = expected_type
        self._name = name or getattr(expected_type, "__name__", _DEFAULT_NAME)
        self._period = period
        self._clock = clock.RealClock()
        self._last_sync_resource_version = ""

    async def run(self, stop_event):
        logger.debug("Starting reflector %s", self._name)
        task = asyncio.ensure_future(
            wait.until(self._list_and_watch_once, self._period, stop_event)
        )
        try:
            await stop_event.wait()
        finally:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            logger.debug("Stopped reflector %s", self._name)

    def last_sync_resource_version(self):
        return self._last_sync_resource_version

    async def _list_and_watch_once(self):
        try:
            await self.list_and_watch()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("Failed to list and watch %s: %r", self._name, e)

    async def list_and_watch(self):
        logger.debug("Listing and watching %s", self._name)
        list_ = await self._lister_watcher.list({"resource_version": "0"})
        resource_version = meta.list_accessor(list_).resource_version
        await self._store.replace(meta.extract_list(list_), resource_version)
        self._last_sync_resource_version = resource_version

        while True:
            options = {
                "resource_version": self._last_sync_resource_version,
                "timeout_seconds": int(_MIN_WATCH_TIMEOUT * (random.random() + 1)),
            }
            try:
                w = await self._lister_watcher.watch(options)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error("Failed to watch %s: %r", self._name, e)
                return
            try:
                await self._watch_handler(w)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning("watch of %s ended with: %r", self._name, e)
                return

    async def _watch_handler(self, w):
        start = self._clock.now()
        event_count = 0
        async with w:
            async for event in w:
                if event["type"] == watch.EventType.ERROR:
                    raise WatchError(event["object"])
                obj = event["object"]
                try:
                    resource_version = meta.accessor(obj).resource_version
                except meta.NotObjectError:
                    logger.error("unable to understand watch event %r", event)
                    continue
                # Bookmarks only carry a resource version
                if event["type"] != watch.EventType.BOOKMARK:
                    if self._expected_type is not None and not isinstance(
                        obj, self._expected_type
                    ):
                        logger.error(
                            "expected type %s, but watch event object had type %s",
                            self._name,
                            type(obj).__name__,
                        )
                        continue
                    await self._handle_event(event["type"], obj)
                self._last_sync_resource_version = resource_version
                event_count += 1

        if self._clock.since(start) < 1 and not event_count:
            raise WatchError(
                "very short watch: Unexpected watch close - "
                "watch lasted less than a second and no items received"
            )
        logger.debug(
            "Watch close - %s total %s items received", self._name, event_count
        )

    async def _handle_event(self, type_, obj):
        if type_ == watch.EventType.ADDED:
            handle = self._store.add
        elif type_ == watch.EventType.MODIFIED:
            handle = self._store.update
        elif type_ == watch.EventType.DELETED:
            handle = self._store.delete
        else:
            logger.error("unable to understand watch event type %r", type_)
            return
        try:
            await handle(obj)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                "unable to apply %s watch event for %s: %r", type_, self._name, e
            )


_DEFAULT_NAME = "<unspecified>"
_MIN_WATCH_TIMEOUT = 5 * 60
