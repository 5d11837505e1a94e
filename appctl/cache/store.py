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
from typing import Any, NamedTuple

from appctl.api import meta


class StoreKeyError(KeyError):
    def __init__(self, obj):
        super().__init__(obj)
        self.obj = obj


class DeletedFinalStateUnknown(NamedTuple):
    """Placed in a delete notification when the deletion itself was missed.

    Happens when the watch was disconnected while the object was deleted and the
    deletion is only noticed on the next relist. `obj` is the last known state of
    the object and may be stale.
    parts = key.split("/")
    if len(parts) == 1 and parts[0]:
        return "", parts[0]
    if len(parts) == 2 and parts[1]:
        return parts[0], parts[1]
    raise ValueError(f"unexpected key format: {key!r}")


def new_store(key_func=deletion_handling_meta_namespace_key_func):
    return _Cache(key_func)


class _Cache:
    def __init__(self, key_func):
        self._key_func = key_func
        self._lock = asyncio.Lock()
        self._items = {}

    def __len__(self):
        return len(self._items)

    async def add(self, obj):
        key = self._key_of(obj)
        async with self._lock:
            self._items[key] = obj

    async def update(self, obj):
        await self.add(obj)

    async def delete(self, obj):
        key = self._key_of(obj)
        async with self._lock:
            self._items.pop(key, None)

    def list(self):
        return list(self._items.values())

    def list_keys(self):
        return list(self._items)

    def get(self, obj):
        return self.get_by_key(self._key_of(obj))

    def get_by_key(self, key):
        return self._items.get(key)

    async def replace(self, list_):
        items = {self._key_of(item): item for item in list_}
        async with self._lock:
            self._items = items

    def _key_of(self, obj):
        try:
            return self._key_func(obj)
        except Exception as e:
            raise StoreKeyError(obj) from e
