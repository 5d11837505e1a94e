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

import logging

from appctl.api import meta
from appctl.cache import store
from appctl.util import runtime

logger = logging.getLogger(__name__)


class EnqueueOnChange:
    def __init__(self, enqueue):
        self._enqueue = enqueue

    async def on_add(self, obj):
        await self._enqueue(obj)

    async def on_update(self, old, new):
        if _same_resource_version(old, new):
            return
        await self._enqueue(new)

    async def on_delete(self, obj):
        pass


class EnqueueControllerOf:
    def __init__(self, owner_kind, owner_lister, enqueue):
        self._owner_kind = owner_kind
        self._owner_lister = owner_lister
        self._enqueue = enqueue

    async def on_add(self, obj):
        await self.handle_object(obj)

    async def on_update(self, old, new):
        if _same_resource_version(old, new):
            return
        await self.handle_object(new)

    async def on_delete(self, obj):
        await self.handle_object(obj)

    async def handle_object(self, obj):
        if isinstance(obj, store.DeletedFinalStateUnknown):
            try:
                name = meta.accessor(obj.obj).name
            except meta.NotObjectError:
                runtime.handle_error("error decoding object tombstone, invalid type")
                return
            logger.debug("Recovered deleted object %r from tombstone", name)
            obj = obj.obj
        try:
            metadata = meta.accessor(obj)
        except meta.NotObjectError:
            runtime.handle_error("error decoding object, invalid type")
            return
        logger.debug("Processing object: %s", metadata.name)

        owner_ref = meta.get_controller_of(obj)
        if owner_ref is None or owner_ref.kind != self._owner_kind:
            return
        try:
            owner = self._owner_lister.by_namespace(metadata.namespace).get(
                owner_ref.name
            )
        except KeyError:
            logger.debug(
                "ignoring orphaned object '%s/%s' of %s %r",
                metadata.namespace,
                metadata.name,
                self._owner_kind,
                owner_ref.name,
            )
            return
        await self._enqueue(owner)


def _same_resource_version(old, new):
    try:
        return meta.accessor(old).resource_version == meta.accessor(
            new
        ).resource_version
    except meta.NotObjectError:
        return False
