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

Thin typed wrappers over the generated `kubernetes_asyncio` APIs.

Deployments go through `AppsV1Api`. Applications are a custom resource, so they go
through `CustomObjectsApi` and are converted to and from raw objects by the scheme.
Errors are the `ApiException`s raised by `kubernetes_asyncio`.

"""

import functools

from kubernetes_asyncio.client import api

from appctl.api import meta
from appctl.apis.application.v1 import types as application_v1
from appctl.cache import list_watch


class Clientset:
    def __init__(self, api_client, scheme):
        self._deployments = DeploymentsClient(api_client)
        self._applications = ApplicationsClient(api_client, scheme)

    def deployments(self):
        return self._deployments

    def applications(self):
        return self._applications


class DeploymentsClient:
    def __init__(self, api_client=None):
        self._api = api.AppsV1Api(api_client)

    async def create(self, deployment):
        namespace = meta.accessor(deployment).namespace
        return await self._api.create_namespaced_deployment(namespace, deployment)

    async def update(self, deployment):
        metadata = meta.accessor(deployment)
        return await self._api.replace_namespaced_deployment(
            metadata.name, metadata.namespace, deployment
        )

    def list_watch(self, namespace=None, tweak_list_options=None):
        if namespace:
            return list_watch.new_from_lister(
                self._api.list_namespaced_deployment,
                {"namespace": namespace},
                tweak_list_options=tweak_list_options,
            )
        return list_watch.new_from_lister(
            self._api.list_deployment_for_all_namespaces,
            tweak_list_options=tweak_list_options,
        )


class ApplicationsClient:
    _gvr = application_v1.GROUP_VERSION_RESOURCE

    def __init__(self, api_client, scheme):
        self._api = api.CustomObjectsApi(api_client)
        self._scheme = scheme
        self._decode = functools.partial(
            scheme.decode, application_v1.GROUP_VERSION_KIND
        )

    async def update_status(self, app):
        metadata = meta.accessor(app)
        result = await self._api.replace_namespaced_custom_object_status(
            self._gvr.group,
            self._gvr.version,
            metadata.namespace,
            self._gvr.resource,
            metadata.name,
            self._scheme.encode(app),
        )
        return self._decode(result)

    def list_watch(self, namespace=None, tweak_list_options=None):
        kwargs = {
            "group": self._gvr.group,
            "version": self._gvr.version,
            "plural": self._gvr.resource,
        }
        if namespace:
            kwargs["namespace"] = namespace
            lister = self._api.list_namespaced_custom_object
        else:
            lister = self._api.list_cluster_custom_object
        return list_watch.new_from_lister(
            lister, kwargs, decode=self._decode, tweak_list_options=tweak_list_options
        )
