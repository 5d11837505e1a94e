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

from kubernetes_asyncio.client import models

from appctl.api import meta
from appctl.apis.application.v1 import types as application_v1
from appctl.cache import store
from appctl.record import event
from appctl.util import runtime

logger = logging.getLogger(__name__)

SUCCESS_SYNCED = "Synced"
ERR_RESOURCE_EXISTS = "ErrResourceExists"
MESSAGE_RESOURCE_EXISTS = 'Resource "%s" already exists and is not managed by Application'
MESSAGE_RESOURCE_SYNCED = "Application synced successfully"

MAIN_CONTAINER_NAME = "main"


class ResourceExistsError(Exception):
    pass


class Reconciler:
    """Drives the Deployment of an Application towards the Application's spec.

    Reads come from the informer caches, which may be stale; writes go through
    the clientset. Any error raised by `reconcile` means the key should be retried.
    pod_spec = deployment.spec.template.spec
    for container in (pod_spec.containers if pod_spec else None) or []:
        if container.name == MAIN_CONTAINER_NAME:
            return container
    return models.V1Container(name="")


def new_deployment(app):
    labels = {"controller": app.metadata.name}
    return models.V1Deployment(
        metadata=models.V1ObjectMeta(
            name=app.metadata.name,
            namespace=app.metadata.namespace,
            owner_references=[
                meta.new_controller_ref(app, application_v1.GROUP_VERSION_KIND)
            ],
        ),
        spec=models.V1DeploymentSpec(
            replicas=app.spec.replicas,
            selector=models.V1LabelSelector(match_labels=labels),
            template=models.V1PodTemplateSpec(
                metadata=models.V1ObjectMeta(labels=labels),
                spec=models.V1PodSpec(
                    containers=[
                        models.V1Container(
                            name=MAIN_CONTAINER_NAME, image=app.spec.image_name
                        )
                    ]
                ),
            ),
        ),
    )
