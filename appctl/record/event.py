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
import datetime
import logging
import uuid

from kubernetes_asyncio.client import models

from appctl.api import meta

logger = logging.getLogger(__name__)

EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"


class EventRecorder:
    def __init__(self, core_api, component, scheme):
        self._core_api = core_api
        self._component = component
        self._scheme = scheme
        self._tasks = set()

    def event(self, obj, type_, reason, message):
        if type_ not in (EVENT_TYPE_NORMAL, EVENT_TYPE_WARNING):
            logger.error("unsupported event type: %r", type_)
            return
        try:
            ref = self._get_reference(obj)
        except (KeyError, meta.NotObjectError) as e:
            logger.error(
                "Could not construct reference to: %r due to: %r. "
                "Will not report event: %r %r %r",
                obj,
                e,
                type_,
                reason,
                message,
            )
            return
        logger.info(
            "Event(%s/%s %s): type: %r reason: %r %s",
            ref.namespace,
            ref.name,
            ref.kind,
            type_,
            reason,
            message,
        )
        task = asyncio.ensure_future(
            self._write(self._make_event(ref, type_, reason, message))
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def eventf(self, obj, type_, reason, message_fmt, *args):
        self.event(obj, type_, reason, message_fmt % args)

    async def shutdown(self):
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _get_reference(self, obj):
        gvk = self._scheme.object_kind(obj)
        metadata = meta.accessor(obj)
        return models.V1ObjectReference(
            api_version=gvk.api_version,
            kind=gvk.kind,
            namespace=metadata.namespace,
            name=metadata.name,
            uid=metadata.uid,
            resource_version=metadata.resource_version,
        )

    def _make_event(self, ref, type_, reason, message):
        now = datetime.datetime.now(datetime.timezone.utc)
        namespace = ref.namespace or "default"
        return models.CoreV1Event(
            metadata=models.V1ObjectMeta(
                name=f"{ref.name}.{uuid.uuid4().hex[:16]}", namespace=namespace
            ),
            involved_object=ref,
            reason=reason,
            message=message,
            type=type_,
            source=models.V1EventSource(component=self._component),
            first_timestamp=now,
            last_timestamp=now,
            count=1,
        )

    async def _write(self, event):
        try:
            await self._core_api.create_namespaced_event(
                event.metadata.namespace, event
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                "Server rejected event %r (will not retry!): %r",
                event.reason,
                e,
            )


class FakeRecorder:
    def __init__(self):
        self.events = []

    def event(self, obj, type_, reason, message):
        self.events.append(f"{type_} {reason} {message}")

    def eventf(self, obj, type_, reason, message_fmt, *args):
        self.event(obj, type_, reason, message_fmt % args)

    async def shutdown(self):
        pass
