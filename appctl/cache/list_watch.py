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

from kubernetes_asyncio import watch as _watch

from appctl.api import meta
from appctl.watch import watch


class ListWatch:
    def __init__(self, list_func, watch_func):
        self.list_func = list_func
        self.watch_func = watch_func

    async def list(self, options):
        return await self.list_func(options)

    async def watch(self, options):
        return await self.watch_func(options)


def new_from_lister(lister, kwargs=None, *, decode=None, tweak_list_options=None):
    base_kwargs = dict(kwargs or {})

    def get_kwargs(options):
        call_kwargs = dict(base_kwargs)
        call_kwargs.update(options)
        if tweak_list_options:
            tweak_list_options(call_kwargs)
        return call_kwargs

    async def list_func(options):
        result = await lister(**get_kwargs(options))
        if decode:
            result = _decode_list(result, decode)
        return result

    async def watch_func(options):
        w = _watch.Watch().stream(lister, **get_kwargs(options))
        if decode:
            return _DecodingWatcher(w, decode)
        return w

    return ListWatch(list_func, watch_func)


def _decode_list(list_, decode):
    decoded = dict(list_)
    decoded["items"] = [decode(item) for item in meta.extract_list(list_)]
    return decoded


class _DecodingWatcher:
    _DECODED_TYPES = (
        watch.EventType.ADDED,
        watch.EventType.MODIFIED,
        watch.EventType.DELETED,
    )

    def __init__(self, watcher, decode):
        self._watcher = watcher
        self._decode = decode

    def __aiter__(self):
        return self

    async def __anext__(self):
        event = await self._watcher.__anext__()
        if event["type"] in self._DECODED_TYPES and isinstance(event["object"], dict):
            event = dict(event, object=self._decode(event["object"]))
        return event

    async def __aenter__(self):
        await self._watcher.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        return await self._watcher.__aexit__(exc_type, exc_value, traceback)
