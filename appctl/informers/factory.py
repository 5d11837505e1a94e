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

from kubernetes_asyncio.client import models

from appctl.apis.application.v1 import types as application_v1
from appctl.cache import listers, shared_informer


def new(
    clientset,
    *,
    namespace=None,
    tweak_list_options=None,
    default_resync=None
):
    # Different from `client-go`: Use default from the sample controller's command
    if default_resync is None:
        default_resync = _DEFAULT_RESYNC_PERIOD
    return _SharedInformerFactory(
        clientset, namespace, tweak_list_options, default_resync
    )


_DEFAULT_RESYNC_PERIOD = 30


class _SharedInformerFactory:
    def __init__(self, clientset, namespace, tweak_list_options, default_resync):
        self._clientset = clientset
        self._namespace = namespace
        self._tweak_list_options = tweak_list_options
        self._default_resync = default_resync
        self._informers = {}
        self._started_informers = set()
        self._tasks = []

    def start(self, stop_event):
        for informer_type, informer in self._informers.items():
            if informer_type not in self._started_informers:
                self._tasks.append(asyncio.ensure_future(informer.run(stop_event)))
                self._started_informers.add(informer_type)

    async def wait_for_cache_sync(self, stop_event):
        informers = {
            informer_type: informer
            for informer_type, informer in self._informers.items()
            if informer_type in self._started_informers
        }
        return {
            informer_type: await shared_informer.wait_for_cache_sync(
                stop_event, informer.has_synced
            )
            for informer_type, informer in informers.items()
        }

    # Not in `client-go`
    async def join(self):
        await asyncio.gather(*self._tasks)

    def applications(self):
        return _ApplicationInformer(self)

    def deployments(self):
        return _DeploymentInformer(self)

    def _informer_for(self, informer_type, new_func):
        informer = self._informers.get(informer_type)
        if informer:
            return informer

        informer = new_func(self._default_resync)
        self._informers[informer_type] = informer
        return informer


class _Informer:
    def __init__(self, factory):
        self._factory = factory

    def informer(self):
        return self._factory._informer_for(self._object_type, self._new)

    def lister(self):
        return listers.new_generic_lister(self.informer().get_indexer(), self._resource)

    def _new(self, resync_period):
        factory = self._factory
        lw = self._client().list_watch(
            factory._namespace, tweak_list_options=factory._tweak_list_options
        )
        return shared_informer.new_shared_informer(
            lw, self._object_type, resync_period
        )


class _ApplicationInformer(_Informer):
    _object_type = application_v1.Application
    _resource = application_v1.PLURAL

    def _client(self):
        return self._factory._clientset.applications()


class _DeploymentInformer(_Informer):
    _object_type = models.V1Deployment
    _resource = "deployments"

    def _client(self):
        return self._factory._clientset.deployments()
