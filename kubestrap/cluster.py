"""
cluster.py
==========

Read-only descriptions of a cluster and of the machine being bootstrapped,
plus the parameters handed to the startup script templates.

All types are named tuples. They are created by the caller (usually with
:func:`kubestrap.config.load_config`) and never modified by kubestrap.
"""
from collections import namedtuple

Endpoint = namedtuple("Endpoint", ["host", "port"])

NetworkRanges = namedtuple("NetworkRanges", ["cidr_blocks"])

ClusterNetwork = namedtuple("ClusterNetwork",
                            ["services", "pods", "service_domain"])

ClusterDescriptor = namedtuple("ClusterDescriptor",
                               ["name", "api_endpoints", "network"])

MachineVersions = namedtuple("MachineVersions", ["kubelet", "control_plane"])

MachineDescriptor = namedtuple("MachineDescriptor", ["name", "versions"])


class TemplateParams(namedtuple("TemplateParams",
                                ["token", "cluster", "machine", "images",
                                 "preloaded"])):
    """
    The parameters for rendering one startup script.

    Args:
        token (str): the bootstrap token used by ``kubeadm``
        cluster (ClusterDescriptor): may be None for image preload scripts
        machine (MachineDescriptor): the machine the script runs on
        images (tuple): container images to pull, in order, a single
            string is one image
        preloaded (bool): the machine image already contains the packages
    """
    __slots__ = ()

    def __new__(cls, token="", cluster=None, machine=None, images=(),
                preloaded=False):
        if isinstance(images, str):
            images = [images]
        return super().__new__(cls, token, cluster, machine, tuple(images),
                               preloaded)
