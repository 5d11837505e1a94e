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

import copy
from typing import Any, NamedTuple

from kubernetes_asyncio.client import models
from kubernetes_asyncio.client.rest import ApiException

from appctl.api import meta
from appctl.apis.application.v1 import types as application_v1
from appctl.cache import store
from appctl.cache.testing import fake_controller_source


class Action(NamedTuple):
    verb: str
    resource: str
    namespace: str
    subresource: str
    object: Any


class FakeClientset:
    def __init__(self):
        self.actions = []
        self._reactors = []
        self._deployments = _FakeDeployments(self)
        self._applications = _FakeApplications(self)

    def deployments(self):
        return self._deployments

    def applications(self):
        return self._applications

    async def add(self, obj):
        if isinstance(obj, application_v1.Application):
            await self._applications.source.add(copy.deepcopy(obj))
        elif isinstance(obj, models.V1Deployment):
            await self._deployments.source.add(copy.deepcopy(obj))
        else:
            raise TypeError(f"unsupported object type {type(obj).__name__}")

    def fail_on(self, verb, resource, err=None):
        if err is None:
            err = ApiException(status=500, reason="InternalError")
        self._reactors.append((verb, resource, err))

    def clear_failures(self):
        self._reactors = []

    def clear_actions(self):
        self.actions = []

    def _record(self, verb, resource, obj, subresource=""):
        namespace = meta.accessor(obj).namespace
        self.actions.append(
            Action(verb, resource, namespace, subresource, copy.deepcopy(obj))
        )
        for reactor_verb, reactor_resource, err in self._reactors:
            if reactor_verb in (verb, "*") and reactor_resource in (resource, "*"):
                raise err


class _FakeResource:
    resource = ""

    def __init__(self, clientset):
        self._clientset = clientset
        self.source = fake_controller_source.FakeControllerSource()

    def list_watch(self, namespace=None, tweak_list_options=None):
        return self.source

    def _find(self, obj):
        key = store.meta_namespace_key_func(obj)
        for item in self.source.items.values():
            if store.meta_namespace_key_func(item) == key:
                return item
        return None

    def _not_found(self, obj):
        return ApiException(
            status=404,
            reason=f'{self.resource} "{meta.accessor(obj).name}" not found',
        )


class _FakeDeployments(_FakeResource):
    resource = "deployments"

    async def create(self, deployment):
        self._clientset._record("create", self.resource, deployment)
        if self._find(deployment) is not None:
            raise ApiException(
                status=409,
                reason=f'{self.resource} "{meta.accessor(deployment).name}" '
                "already exists",
            )
        created = copy.deepcopy(deployment)
        await self.source.add(created)
        return copy.deepcopy(created)

    async def update(self, deployment):
        self._clientset._record("update", self.resource, deployment)
        existing = self._find(deployment)
        if existing is None:
            raise self._not_found(deployment)
        updated = copy.deepcopy(deployment)
        updated.metadata.uid = existing.metadata.uid
        await self.source.modify(updated)
        return copy.deepcopy(updated)


class _FakeApplications(_FakeResource):
    resource = "applications"

    async def update_status(self, app):
        self._clientset._record("update", self.resource, app, subresource="status")
        existing = self._find(app)
        if existing is None:
            raise self._not_found(app)
        updated = copy.deepcopy(existing)._replace(status=app.status)
        await self.source.modify(updated)
        return copy.deepcopy(updated)
