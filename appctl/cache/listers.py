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

from appctl.api import meta


def new_generic_lister(indexer, resource=""):
    return _GenericLister(indexer, resource)


class _GenericLister:
    def __init__(self, indexer, resource):
        self._indexer = indexer
        self._resource = resource

    def list(self):
        return self._indexer.list()

    def get(self, name):
        obj = self._indexer.get_by_key(name)
        if obj is None:
            raise KeyError(f'{self._resource} "{name}" not found')
        return obj

    def by_namespace(self, namespace):
        return _GenericNamespaceLister(self._indexer, self._resource, namespace)


class _GenericNamespaceLister:
    def __init__(self, indexer, resource, namespace):
        self._indexer = indexer
        self._resource = resource
        self._namespace = namespace

    def list(self):
        return [
            obj
            for obj in self._indexer.list()
            if meta.accessor(obj).namespace == self._namespace
        ]

    def get(self, name):
        key = f"{self._namespace}/{name}" if self._namespace else name
        obj = self._indexer.get_by_key(key)
        if obj is None:
            raise KeyError(f'{self._resource} "{key}" not found')
        return obj
