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

import unittest

from kubernetes_asyncio.client.models import (
    V1Deployment,
    V1ObjectMeta,
    V1OwnerReference,
)

from appctl.apis.application.v1 import types as application_v1
from appctl.cache import listers, store
from appctl.cache.testing.util import async_test
from appctl.controller import handler, sync


def new_application(name, resource_version="1"):
    return application_v1.Application(
        metadata=V1ObjectMeta(
            name=name,
            namespace="default",
            uid=f"{name}-uid",
            resource_version=resource_version,
        ),
        spec=application_v1.ApplicationSpec(image_name="nginx", replicas=1),
    )


def owned_by(kind, name, controller=True):
    return V1Deployment(
        metadata=V1ObjectMeta(
            name="child",
            namespace="default",
            resource_version="1",
            owner_references=[
                V1OwnerReference(
                    api_version="cloudest.io/v1",
                    kind=kind,
                    name=name,
                    uid=f"{name}-uid",
                    controller=controller,
                )
            ],
        )
    )


class Recorder:
    def __init__(self):
        self.keys = []

    async def enqueue(self, obj):
        self.keys.append(store.meta_namespace_key_func(obj))


class TestEnqueueOnChange(unittest.TestCase):
    @async_test
    async def test_add(self):
        r = Recorder()
        h = handler.EnqueueOnChange(r.enqueue)
        await h.on_add(new_application("test"))
        self.assertEqual(r.keys, ["default/test"])

    @async_test
    async def test_update(self):
        r = Recorder()
        h = handler.EnqueueOnChange(r.enqueue)
        old = new_application("test", "1")
        await h.on_update(old, old)
        await h.on_update(old, new_application("test", "1"))
        self.assertEqual(r.keys, [])
        await h.on_update(old, new_application("test", "2"))
        self.assertEqual(r.keys, ["default/test"])

    @async_test
    async def test_delete(self):
        r = Recorder()
        h = handler.EnqueueOnChange(r.enqueue)
        await h.on_delete(new_application("test"))
        self.assertEqual(r.keys, [])


class TestEnqueueControllerOf(unittest.TestCase):
    async def new_handler(self, *apps):
        indexer = store.new_store()
        for app in apps:
            await indexer.add(app)
        r = Recorder()
        h = handler.EnqueueControllerOf(
            application_v1.KIND,
            listers.new_generic_lister(indexer, application_v1.PLURAL),
            r.enqueue,
        )
        return h, r

    @async_test
    async def test_owned_object_enqueues_owner(self):
        app = new_application("test")
        h, r = await self.new_handler(app)
        deployment = sync.new_deployment(app)
        await h.on_add(deployment)
        await h.on_delete(deployment)
        self.assertEqual(r.keys, ["default/test", "default/test"])

    @async_test
    async def test_update_with_same_resource_version_is_ignored(self):
        h, r = await self.new_handler(new_application("test"))
        old = owned_by("Application", "test")
        await h.on_update(old, owned_by("Application", "test"))
        self.assertEqual(r.keys, [])
        new = owned_by("Application", "test")
        new.metadata.resource_version = "2"
        await h.on_update(old, new)
        self.assertEqual(r.keys, ["default/test"])

    @async_test
    async def test_no_owner(self):
        h, r = await self.new_handler(new_application("test"))
        await h.on_add(V1Deployment(metadata=V1ObjectMeta(name="test", namespace="default")))
        self.assertEqual(r.keys, [])

    @async_test
    async def test_other_owner_kind(self):
        h, r = await self.new_handler(new_application("test"))
        await h.on_add(owned_by("ReplicaSet", "test"))
        self.assertEqual(r.keys, [])

    @async_test
    async def test_owner_reference_that_is_not_controller(self):
        h, r = await self.new_handler(new_application("test"))
        await h.on_add(owned_by("Application", "test", controller=False))
        self.assertEqual(r.keys, [])

    @async_test
    async def test_orphan(self):
        h, r = await self.new_handler(new_application("other"))
        await h.on_add(owned_by("Application", "test"))
        self.assertEqual(r.keys, [])

    @async_test
    async def test_tombstone(self):
        h, r = await self.new_handler(new_application("test"))
        deployment = owned_by("Application", "test")
        await h.on_delete(store.DeletedFinalStateUnknown("default/child", deployment))
        self.assertEqual(r.keys, ["default/test"])

    @async_test
    async def test_invalid_tombstone(self):
        h, r = await self.new_handler(new_application("test"))
        with self.assertLogs("appctl.util.runtime", "ERROR"):
            await h.on_delete(store.DeletedFinalStateUnknown("default/child", object()))
        self.assertEqual(r.keys, [])

    @async_test
    async def test_invalid_object(self):
        h, r = await self.new_handler(new_application("test"))
        with self.assertLogs("appctl.util.runtime", "ERROR"):
            await h.on_add(V1Deployment())
        self.assertEqual(r.keys, [])


if __name__ == "__main__":
    unittest.main()
