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

Runs the Application controller.

Usage:
kubectl apply -f <Application CRD>
appctl-controller --kubeconfig ~/.kube/config --workers 2

"""

import asyncio
import logging
import signal
import sys

from kubernetes_asyncio import client, config

from appctl.client import clientset
from appctl.cmd import options
from appctl.controller import controller
from appctl.informers import factory
from appctl.record import event
from appctl.runtime import scheme

logger = logging.getLogger(__name__)


async def load_config(kubeconfig=None, master=None):
    configuration = client.Configuration()
    if kubeconfig:
        await config.load_kube_config(
            config_file=kubeconfig, client_configuration=configuration
        )
    elif not master:
        try:
            config.load_incluster_config(client_configuration=configuration)
        except config.ConfigException:
            logger.info("Not running in a cluster, using the default kubeconfig")
            await config.load_kube_config(client_configuration=configuration)
    if master:
        configuration.host = master
    return configuration


async def run(opts):
    try:
        configuration = await load_config(opts.kubeconfig, opts.master)
    except config.ConfigException as e:
        logger.error("Error building kubeconfig: %s", e)
        return 1

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signal_ in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signal_, stop.set)

    async with client.ApiClient(configuration) as api_client:
        s = scheme.new()
        cs = clientset.Clientset(api_client, s)
        recorder = event.EventRecorder(
            client.CoreV1Api(api_client), controller.CONTROLLER_AGENT_NAME, s
        )
        informer_factory = factory.new(
            cs, namespace=opts.namespace, default_resync=opts.resync_period
        )
        c = await controller.new(
            cs, informer_factory.deployments(), informer_factory.applications(), recorder
        )

        informer_factory.start(stop)
        try:
            await c.run(opts.workers, stop)
        except controller.CacheSyncError as e:
            logger.error("Error running controller: %s", e)
            return 1
        finally:
            stop.set()
            await informer_factory.join()
            await recorder.shutdown()
    return 0


def main(argv=None):
    opts = options.parse_args(argv)
    logging.basicConfig(
        level=opts.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return asyncio.run(run(opts))


if __name__ == "__main__":
    sys.exit(main())
