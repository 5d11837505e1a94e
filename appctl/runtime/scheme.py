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

"""

Registry of the object types the controller knows about.

Departs from `apimachinery`: instead of a process-wide scheme that packages add
themselves to at import time, a `Scheme` is built once by `new` and handed to the
components that need to decode, encode or identify objects.

"""

from typing import Any, Callable, NamedTuple, Optional

from kubernetes_asyncio.client import models

from appctl.apis.application.v1 import types as application_v1
from appctl.runtime import schema

APPS_V1 = schema.GroupVersion("apps", "v1")


class _KnownType(NamedTuple):
    type: Any
    decode: Optional[Callable[[dict], Any]]
    encode: Optional[Callable[[Any], dict]]


class Scheme:
    def __init__(self):
        self._types_by_gvk = {}
        self._gvks_by_type = {}

    def add_known_type(self, gvk, type_, *, decode=None, encode=None):
        if gvk in self._types_by_gvk:
            raise ValueError(f"type for {gvk} is already registered")
        self._types_by_gvk[gvk] = _KnownType(type_, decode, encode)
        self._gvks_by_type[type_] = gvk

    def object_kind(self, obj):
        try:
            return self._gvks_by_type[type(obj)]
        except KeyError:
            raise KeyError(f"no kind is registered for the type {type(obj)!r}")

    def decode(self, gvk, data):
        known = self._types_by_gvk[gvk]
        if known.decode is None:
            raise TypeError(f"{gvk} cannot be decoded from a raw object")
        return known.decode(data)

    def encode(self, obj):
        known = self._types_by_gvk[self.object_kind(obj)]
        if known.encode is None:
            raise TypeError(f"{type(obj).__name__} cannot be encoded to a raw object")
        return known.encode(obj)


def new():
    s = Scheme()
    s.add_known_type(APPS_V1.with_kind("Deployment"), models.V1Deployment)
    application_v1.add_to_scheme(s)
    return s
