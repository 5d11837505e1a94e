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

Functions for accessing object data.

Objects handled by the controller don't satisfy a common interface. Deployments are
typed `kubernetes_asyncio` models, Applications are typed records built around a
`V1ObjectMeta`, and list and watch responses for custom resources are raw dicts. The
functions here wrap an object with accessors that depend on the object's type.

"""

from typing import NamedTuple, Optional

from kubernetes_asyncio.client import models


class OwnerReference(NamedTuple):
    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = False


class NotListError(Exception):
    pass


class NotObjectError(Exception):
    pass


def list_accessor(obj):
    try:
        if isinstance(obj, dict):
            return _UnstructuredListAccessor(obj)
        return _ListAccessor(obj)
    except (AttributeError, KeyError, TypeError):
        raise NotListError(f"{type(obj).__name__} is not a list")


def accessor(obj):
    try:
        if isinstance(obj, dict):
            return _UnstructuredAccessor(obj)
        return _Accessor(obj)
    except (AttributeError, KeyError, TypeError):
        raise NotObjectError(f"{type(obj).__name__} has no object metadata")


def extract_list(obj):
    if isinstance(obj, dict):
        return obj.get("items") or []
    return obj.items or []


def get_controller_of(obj) -> Optional[OwnerReference]:
    for ref in accessor(obj).owner_references:
        if ref.controller:
            return ref
    return None


def is_controlled_by(obj, owner):
    ref = get_controller_of(obj)
    if ref is None:
        return False
    return ref.uid == accessor(owner).uid


def new_controller_ref(owner, gvk):
    metadata = accessor(owner)
    return models.V1OwnerReference(
        api_version=gvk.api_version,
        kind=gvk.kind,
        name=metadata.name,
        uid=metadata.uid,
        block_owner_deletion=True,
        controller=True,
    )


class _ListAccessor:
    def __init__(self, obj):
        self._metadata = obj.metadata

    @property
    def resource_version(self):
        return self._metadata.resource_version


class _UnstructuredListAccessor:
    def __init__(self, obj):
        self._metadata = obj["metadata"]

    @property
    def resource_version(self):
        return self._metadata.get("resourceVersion", "")


class _Accessor:
    def __init__(self, obj):
        self._metadata = obj.metadata
        if self._metadata is None:
            raise AttributeError("metadata")

    @property
    def namespace(self):
        return self._metadata.namespace or ""

    @property
    def name(self):
        return self._metadata.name or ""

    @property
    def uid(self):
        return self._metadata.uid or ""

    @property
    def resource_version(self):
        return self._metadata.resource_version or ""

    @resource_version.setter
    def resource_version(self, value):
        self._metadata.resource_version = value

    @property
    def labels(self):
        return self._metadata.labels or {}

    @property
    def owner_references(self):
        return [
            OwnerReference(
                api_version=ref.api_version,
                kind=ref.kind,
                name=ref.name,
                uid=ref.uid,
                controller=bool(ref.controller),
            )
            for ref in self._metadata.owner_references or []
        ]


class _UnstructuredAccessor:
    def __init__(self, obj):
        self._metadata = obj["metadata"]

    @property
    def namespace(self):
        return self._metadata.get("namespace", "")

    @property
    def name(self):
        return self._metadata.get("name", "")

    @property
    def uid(self):
        return self._metadata.get("uid", "")

    @property
    def resource_version(self):
        return self._metadata.get("resourceVersion", "")

    @resource_version.setter
    def resource_version(self, value):
        self._metadata["resourceVersion"] = value

    @property
    def labels(self):
        return self._metadata.get("labels") or {}

    @property
    def owner_references(self):
        return [
            OwnerReference(
                api_version=ref.get("apiVersion", ""),
                kind=ref.get("kind", ""),
                name=ref.get("name", ""),
                uid=ref.get("uid", ""),
                controller=bool(ref.get("controller")),
            )
            for ref in self._metadata.get("ownerReferences") or []
        ]
