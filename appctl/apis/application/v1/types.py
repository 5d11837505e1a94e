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
from typing import Any, NamedTuple, Optional

from kubernetes_asyncio.client import models

from appctl.runtime import schema

GROUP_NAME = "cloudest.io"
SCHEME_GROUP_VERSION = schema.GroupVersion(GROUP_NAME, "v1")
KIND = "Application"
PLURAL = "applications"
GROUP_VERSION_KIND = SCHEME_GROUP_VERSION.with_kind(KIND)
GROUP_VERSION_RESOURCE = SCHEME_GROUP_VERSION.with_resource(PLURAL)


class ApplicationSpec(NamedTuple):
    image_name: str = ""
    replicas: Optional[int] = None


class ApplicationStatus(NamedTuple):
    deployment_ref_namespace: str = ""
    deployment_ref_name: str = ""


class Application(NamedTuple):
    """A specification for an application resource."""

    metadata: Any  # V1ObjectMeta
    spec: ApplicationSpec = ApplicationSpec()
    status: ApplicationStatus = ApplicationStatus()
    api_version: str = str(SCHEME_GROUP_VERSION)
    kind: str = KIND


def deep_copy(app):
    return copy.deepcopy(app)


def decode(data):
    metadata = data.get("metadata") or {}
    spec = data.get("spec") or {}
    status = data.get("status") or {}
    replicas = spec.get("replicas")
    return Application(
        api_version=data.get("apiVersion", str(SCHEME_GROUP_VERSION)),
        kind=data.get("kind", KIND),
        metadata=models.V1ObjectMeta(
            name=metadata.get("name"),
            namespace=metadata.get("namespace"),
            uid=metadata.get("uid"),
            resource_version=metadata.get("resourceVersion"),
            generation=metadata.get("generation"),
            labels=metadata.get("labels"),
            annotations=metadata.get("annotations"),
        ),
        spec=ApplicationSpec(
            image_name=spec.get("imageName", ""),
            replicas=None if replicas is None else int(replicas),
        ),
        status=ApplicationStatus(
            deployment_ref_namespace=status.get("deploymentRefNamespace", ""),
            deployment_ref_name=status.get("deploymentRefName", ""),
        ),
    )


def encode(app):
    metadata = {
        "name": app.metadata.name,
        "namespace": app.metadata.namespace,
        "uid": app.metadata.uid,
        "resourceVersion": app.metadata.resource_version,
        "generation": app.metadata.generation,
        "labels": app.metadata.labels,
        "annotations": app.metadata.annotations,
    }
    status = {}
    if app.status.deployment_ref_namespace:
        status["deploymentRefNamespace"] = app.status.deployment_ref_namespace
    if app.status.deployment_ref_name:
        status["deploymentRefName"] = app.status.deployment_ref_name
    return {
        "apiVersion": app.api_version,
        "kind": app.kind,
        "metadata": {k: v for k, v in metadata.items() if v is not None},
        "spec": {"imageName": app.spec.image_name, "replicas": app.spec.replicas},
        "status": status,
    }


def add_to_scheme(scheme):
    scheme.add_known_type(GROUP_VERSION_KIND, Application, decode=decode, encode=encode)
