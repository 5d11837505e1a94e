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
import logging
from typing import Any, NamedTuple

from appctl.cache import reflector, store
from appctl.util import wait

logger = logging.getLogger(__name__)


def new_shared_informer(lw, obj_type, resync_period, *, name=None):
    return _SharedInformer(
        indexer=store.new_store(),
        lister_watcher=lw,
        object_type=obj_type,
        resync_period=resync_period,
        name=name,
    )


async def wait_for_cache_sync(stop_event, *cache_syncs):
    def condition():
        return all(sync_func() for sync_func in cache_syncs)

    try:
        await wait.poll_immediate_until(_SYNCED_POLL_PERIOD, condition, stop_event)
    except wait.WaitTimeoutError:
        logger.info("stop requested")
        return False
    logger.debug("caches populated")
    return True


_SYNCED_POLL_PERIOD = 0.1
_MINIMUM_RESYNC_PERIOD = 1


class _SharedInformer:
    def __init__(self, *, indexer, lister_watcher, object_type, resync_period, name):
        if resync_period and resync_period < _MINIMUM_RESYNC_PERIOD:
            logger.warning(
                "resync_period %s is too small. "
                "Changing it to the minimum allowed value of %s",
                resync_period,
                _MINIMUM_RESYNC_PERIOD,
            )
            resync_period = _MINIMUM_RESYNC_PERIOD
        self._indexer = indexer
        self._lister_watcher = lister_watcher
        self._object_type = object_type
        self._resync_period = resync_period
        self._name = name or getattr(object_type, "__name__", None)
        self._listeners = []
        self._reflector = None
        self._synced = False
        self._started = False
        self._stopped = False
        # Held while the store changes and the change is handed to listeners
        self._block_deltas = asyncio.Lock()

    async def add_event_handler(self, handler):
        async with self._block_deltas:
            if self._stopped:
                logger.info(
                    "Handler %s was not added to shared informer "
                    "because it has stopped already",
                    handler,
                )
                return
            listener = _ProcessListener(handler)
            self._listeners.append(listener)
            if not self._started:
                return
            listener.start()
            for item in self._indexer.list():
                listener.add(_AddNotification(new_obj=item))

    async def run(self, stop_event):
        async with self._block_deltas:
            self._reflector = reflector.Reflector(
                self._lister_watcher, self._object_type, self, name=self._name
            )
            self._started = True
            for listener in self._listeners:
                listener.start()

        resync_task = None
        if self._resync_period:
            resync_task = asyncio.ensure_future(self._resync_loop(stop_event))
        try:
            await self._reflector.run(stop_event)
        finally:
            async with self._block_deltas:
                self._stopped = True
            if resync_task:
                resync_task.cancel()
                await asyncio.gather(resync_task, return_exceptions=True)
            await asyncio.gather(*(listener.stop() for listener in self._listeners))

    def has_synced(self):
        return self._synced

    def last_sync_resource_version(self):
        return self._reflector.last_sync_resource_version() if self._reflector else ""

    def get_indexer(self):
        return self._indexer

    # Called by the reflector

    async def replace(self, items, resource_version):
        async with self._block_deltas:
            keys = set()
            for item in items:
                key = store.meta_namespace_key_func(item)
                keys.add(key)
                self._distribute(await self._upsert(key, item))
            for key in self._indexer.list_keys():
                if key in keys:
                    continue
                old = self._indexer.get_by_key(key)
                await self._indexer.delete(old)
                self._distribute(
                    _DeleteNotification(
                        old_obj=store.DeletedFinalStateUnknown(key, old)
                    )
                )
            self._synced = True
        logger.debug(
            "Replaced %s cache with %d items at resource version %s",
            self._name,
            len(keys),
            resource_version,
        )

    async def add(self, obj):
        async with self._block_deltas:
            key = store.meta_namespace_key_func(obj)
            self._distribute(await self._upsert(key, obj))

    async def update(self, obj):
        await self.add(obj)

    async def delete(self, obj):
        async with self._block_deltas:
            await self._indexer.delete(obj)
            self._distribute(_DeleteNotification(old_obj=obj))

    async def _upsert(self, key, obj):
        old = self._indexer.get_by_key(key)
        await self._indexer.add(obj)
        if old is None:
            return _AddNotification(new_obj=obj)
        return _UpdateNotification(old_obj=old, new_obj=obj)

    def _distribute(self, notification):
        for listener in self._listeners:
            listener.add(notification)

    async def _resync_loop(self, stop_event):
        while not await wait.wait_or_stop(self._resync_period, stop_event):
            async with self._block_deltas:
                if not self._synced:
                    continue
                logger.debug("forcing resync of %s", self._name)
                for obj in self._indexer.list():
                    self._distribute(_UpdateNotification(old_obj=obj, new_obj=obj))


class _UpdateNotification(NamedTuple):
    old_obj: Any
    new_obj: Any


class _AddNotification(NamedTuple):
    new_obj: Any


class _DeleteNotification(NamedTuple):
    old_obj: Any


class _ProcessListener:
    _STOP = object()

    def __init__(self, handler):
        self._handler = handler
        self._notifications = asyncio.Queue()
        self._task = None

    def start(self):
        if self._task is None:
            self._task = asyncio.ensure_future(self._run())

    def add(self, notification):
        self._notifications.put_nowait(notification)

    async def stop(self):
        if self._task is None:
            return
        self._notifications.put_nowait(self._STOP)
        await asyncio.gather(self._task, return_exceptions=True)

    async def _run(self):
        while True:
            notification = await self._notifications.get()
            if notification is self._STOP:
                return
            try:
                await self._dispatch(notification)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(
                    "handler %r failed on %s", self._handler, type(notification).__name__
                )

    async def _dispatch(self, notification):
        if isinstance(notification, _UpdateNotification):
            await self._handler.on_update(notification.old_obj, notification.new_obj)
        elif isinstance(notification, _AddNotification):
            await self._handler.on_add(notification.new_obj)
        elif isinstance(notification, _DeleteNotification):
            await self._handler.on_delete(notification.old_obj)
        else:
            logger.error("unrecognized notification: %r", notification)
