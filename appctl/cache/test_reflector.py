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
import unittest
from unittest import mock

from kubernetes_asyncio.client.models import (
    V1Deployment,
    V1DeploymentList,
    V1ListMeta,
    V1ObjectMeta,
    V1Service,
)

from appctl.cache import reflector, store
from appctl.cache.list_watch import ListWatch
from appctl.cache.reflector import Reflector, WatchError
from appctl.cache.testing.util import async_test
from appctl.util import wait
from appctl.watch import watch


class TestReflector(unittest.TestCase):
    @async_test
    async def test_close_watch_on_error(self):
        deployment = V1Deployment(metadata=V1ObjectMeta(name="bar"))
        fw = watch.FakeWatcher()

        async def list_func(options):
            return empty_list("1")

        async def watch_func(options):
            return fw

        r = Reflector(ListWatch(list_func, watch_func), V1Deployment, RecordingStore())
        fw.error(deployment)
        await asyncio.wait_for(r.list_and_watch(), wait.FOREVER_TEST_TIMEOUT)
        self.assertTrue(fw.is_stopped())

    @async_test
    async def test_run_until(self):
        stop_event = asyncio.Event()
        s = RecordingStore()
        fw = watch.FakeWatcher()

        async def list_func(options):
            return empty_list("1")

        async def watch_func(options):
            return fw

        r = Reflector(ListWatch(list_func, watch_func), V1Deployment, s, period=0.01)
        task = asyncio.ensure_future(r.run(stop_event))
        fw.add(V1Deployment(metadata=V1ObjectMeta(name="bar", resource_version="2")))
        await wait.poll(0.01, wait.FOREVER_TEST_TIMEOUT, lambda: len(s) == 1)
        self.assertEqual(r.last_sync_resource_version(), "2")

        stop_event.set()
        await asyncio.wait_for(task, wait.FOREVER_TEST_TIMEOUT)
        self.assertTrue(fw.is_stopped())

    @async_test
    async def test_relist_after_watch_error(self):
        stop_event = asyncio.Event()
        lists = []
        watchers = []

        async def list_func(options):
            lists.append(options)
            return empty_list(str(len(lists)))

        async def watch_func(options):
            watchers.append(watch.FakeWatcher())
            return watchers[-1]

        r = Reflector(
            ListWatch(list_func, watch_func), V1Deployment, RecordingStore(), period=0.01
        )
        task = asyncio.ensure_future(r.run(stop_event))
        await wait.poll(0.01, wait.FOREVER_TEST_TIMEOUT, lambda: watchers)
        watchers[0].error({"status": "Failure"})
        await wait.poll(0.01, wait.FOREVER_TEST_TIMEOUT, lambda: len(watchers) == 2)

        stop_event.set()
        await asyncio.wait_for(task, wait.FOREVER_TEST_TIMEOUT)
        self.assertEqual(len(lists), 2)
        self.assertEqual(lists[0], {"resource_version": "0"})
        self.assertEqual(r.last_sync_resource_version(), "2")

    @async_test
    async def test_watch_handler_error(self):
        g = Reflector(ListWatch(None, None), V1Deployment, RecordingStore())
        fw = watch.FakeWatcher()
        fw.stop()
        with self.assertRaises(WatchError):
            await g._watch_handler(fw)

    @async_test
    async def test_watch_handler(self):
        s = RecordingStore()
        g = Reflector(ListWatch(None, None), V1Deployment, s)
        fw = watch.FakeWatcher()
        await s.add(V1Deployment(metadata=V1ObjectMeta(name="foo")))
        await s.add(V1Deployment(metadata=V1ObjectMeta(name="bar")))

        fw.add(V1Service(metadata=V1ObjectMeta(name="rejected")))
        fw.delete(V1Deployment(metadata=V1ObjectMeta(name="foo")))
        fw.modify(V1Deployment(metadata=V1ObjectMeta(name="bar", resource_version="55")))
        fw.add(V1Deployment(metadata=V1ObjectMeta(name="baz", resource_version="32")))
        fw.stop()
        await g._watch_handler(fw)

        self.assertIsNone(s.get_by_key("foo"))
        self.assertIsNone(s.get_by_key("rejected"))
        self.assertEqual(s.get_by_key("bar").metadata.resource_version, "55")
        self.assertEqual(s.get_by_key("baz").metadata.resource_version, "32")
        self.assertEqual(g.last_sync_resource_version(), "32")

    @async_test
    async def test_watch_handler_bookmark(self):
        s = RecordingStore()
        g = Reflector(ListWatch(None, None), V1Deployment, s)
        fw = watch.FakeWatcher()
        fw.action(
            watch.EventType.BOOKMARK,
            {"kind": "Deployment", "metadata": {"resourceVersion": "40"}},
        )
        fw.stop()
        with mock.patch.object(reflector.logger, "error") as log_error:
            await g._watch_handler(fw)
        log_error.assert_not_called()

        self.assertEqual(len(s), 0)
        self.assertEqual(g.last_sync_resource_version(), "40")

    @async_test
    async def test_list_and_watch_replaces_store(self):
        s = RecordingStore()
        await s.add(V1Deployment(metadata=V1ObjectMeta(name="stale")))
        fw = watch.FakeWatcher()

        async def list_func(options):
            return V1DeploymentList(
                metadata=V1ListMeta(resource_version="10"),
                items=[V1Deployment(metadata=V1ObjectMeta(name="fresh"))],
            )

        async def watch_func(options):
            self.assertEqual(options["resource_version"], "10")
            self.assertGreater(options["timeout_seconds"], 0)
            fw.error({"status": "Failure"})
            return fw

        r = Reflector(ListWatch(list_func, watch_func), V1Deployment, s)
        await asyncio.wait_for(r.list_and_watch(), wait.FOREVER_TEST_TIMEOUT)
        self.assertEqual(s.list_keys(), ["fresh"])
        self.assertEqual(s.replaced_at, "10")


def empty_list(resource_version):
    return V1DeploymentList(
        metadata=V1ListMeta(resource_version=resource_version), items=[]
    )


class RecordingStore:
    def __init__(self):
        self._store = store.new_store(store.meta_namespace_key_func)
        self.replaced_at = None

    def __len__(self):
        return len(self._store)

    async def replace(self, items, resource_version):
        await self._store.replace(items)
        self.replaced_at = resource_version

    async def add(self, obj):
        await self._store.add(obj)

    async def update(self, obj):
        await self._store.update(obj)

    async def delete(self, obj):
        await self._store.delete(obj)

    def get_by_key(self, key):
        return self._store.get_by_key(key)

    def list_keys(self):
        return self._store.list_keys()


if __name__ == "__main__":
    unittest.main()
