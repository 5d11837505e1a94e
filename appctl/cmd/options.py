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

import argparse
import os

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def new_parser(environ=None):
    if environ is None:
        environ = os.environ
    parser = argparse.ArgumentParser(
        prog="appctl-controller",
        description="Keep a Deployment in step with each Application resource.",
    )
    parser.add_argument(
        "--kubeconfig",
        default=environ.get("KUBECONFIG") or None,
        help="Path to a kubeconfig. Only required if out-of-cluster.",
    )
    parser.add_argument(
        "--master",
        default=None,
        help="The address of the Kubernetes API server. Overrides any value in "
        "kubeconfig. Only required if out-of-cluster.",
    )
    parser.add_argument(
        "--namespace",
        default=environ.get("APPCTL_NAMESPACE") or None,
        help="Only watch Applications and Deployments in this namespace "
        "(default: all namespaces).",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=environ.get("APPCTL_WORKERS", "2"),
        help="Number of Applications reconciled concurrently (default: 2).",
    )
    parser.add_argument(
        "--resync-period",
        type=_non_negative_float,
        default="30",
        help="Seconds between resyncs of the informer caches; 0 disables them "
        "(default: 30).",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=environ.get("APPCTL_LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO).",
    )
    return parser


def parse_args(argv=None, environ=None):
    return new_parser(environ).parse_args(argv)


def _positive_int(value):
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value!r}")
    return n


def _non_negative_float(value):
    try:
        f = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid float value: {value!r}")
    if f < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value!r}")
    return f
