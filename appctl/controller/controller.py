# Copyright 2017 The Kubernetes Authors.
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

from appctl.api import meta
from appctl.apis.application.v1 import types as application_v1
from appctl.cache import shared_informer, store
from appctl.controller import handler, sync
from appctl.util import runtime, wait
from appctl.workqueue import rate_limiting_queue

logger = logging.getLogger(__name__)

CONTROLLER_AGENT_NAME = "application-controller"


class CacheSyncError(Exception):
    pass


async def new(
    clientset, deployment_informer, application_informer, recorder, *, rate_limiter=None
):
    reconciler = sync.Reconciler(
        clientset,
        application_informer.lister(),
        deployment_informer.lister(),
        recorder,
    )
    controller = Controller(
        reconciler,
        rate_limiting_queue.new(rate_limiter, name="Applications"),
        [
            deployment_informer.informer().has_synced,
            application_informer.informer().has_synced,
        ],
    )

    logger.info("Setting up event handlers")
    await application_informer.informer().add_event_handler(
        handler.EnqueueOnChange(controller.enqueue_application)
    )
    await deployment_informer.informer().add_event_handler(
        handler.EnqueueControllerOf(
            application_v1.KIND,
            application_informer.lister(),
            controller.enqueue_application,
        )
    )
    return controller


class Controller:
    def __init__(self, reconciler, queue, informers_synced):
        self.queue = queue
        self._reconciler = reconciler
        self._informers_synced = informers_synced

    async def run(self, workers, stop_event):
        tasks = []
        try:
            logger.info("Starting Application controller")

            logger.info("Waiting for informer caches to sync")
            if not await shared_informer.wait_for_cache_sync(
                stop_event, *self._informers_synced
            ):
                raise CacheSyncError("failed to wait for caches to sync")

            logger.info("Starting workers")
            for _ in range(workers):
                tasks.append(
                    asyncio.ensure_future(
                        wait.until(self._run_worker, _WORKER_PERIOD, stop_event)
                    )
                )

            logger.info("Started workers")
            await stop_event.wait()
            logger.info("Shutting down workers")
        finally:
            await self.queue.shut_down()
            # Workers are only restarted until the stop event is set
            if not stop_event.is_set():
                for task in tasks:
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def enqueue_application(self, obj):
        try:
            key = store.meta_namespace_key_func(obj)
        except meta.NotObjectError as e:
            runtime.handle_error(e)
            return
        await self.queue.add(key)

    async def sync_handler(self, key):
        await self._reconciler.reconcile(key)

    async def _run_worker(self):
        while await self.process_next_work_item():
            pass

    async def process_next_work_item(self):
        obj, shutdown = await self.queue.get()
        if shutdown:
            return False

        try:
            if not isinstance(obj, str):
                self.queue.forget(obj)
                runtime.handle_error(f"expected string in workqueue but got {obj!r}")
                return True
            try:
                await self.sync_handler(obj)
            except asyncio.CancelledError:
                raise
            except Exception:
                await self.queue.add_rate_limited(obj)
                logger.exception("error syncing %r, requeuing", obj)
                return True
            self.queue.forget(obj)
            logger.info("Successfully synced %r", obj)
            return True
        finally:
            await self.queue.done(obj)


_WORKER_PERIOD = 1
