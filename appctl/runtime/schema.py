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

from typing import NamedTuple


class GroupVersion(NamedTuple):
    group: str
    version: str

    def __str__(self):
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"

    def with_kind(self, kind):
        return GroupVersionKind(self.group, self.version, kind)

    def with_resource(self, resource):
        return GroupVersionResource(self.group, self.version, resource)


class GroupVersionKind(NamedTuple):
    group: str
    version: str
    kind: str

    def __str__(self):
        return f"{self.group}/{self.version}: kind={self.kind}"

    @property
    def api_version(self):
        return str(GroupVersion(self.group, self.version))


class GroupVersionResource(NamedTuple):
    group: str
    version: str
    resource: str

    def __str__(self):
        return f"{self.group}/{self.version}: resource={self.resource}"

