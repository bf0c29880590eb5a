"""
config.py
=========

Read the parameters of a startup script from a YAML file::

    token: abcdef.0123456789abcdef
    preloaded: false
    images:
      - k8s.gcr.io/pause:3.1
    cluster:
      name: demo
      api-endpoints:
        - host: 10.0.0.1
          port: 443
      network:
        services: [10.96.0.0/12]
        pods: [192.168.0.0/16]
        service-domain: cluster.local
    machine:
      name: demo-node-1
      kubelet-version: 1.9.0
      control-plane-version: 1.9.0

Sections which are left out become ``None``. That is not an error here,
rendering a fragment which needs them raises
:class:`kubestrap.provision.template.MissingField`.
"""
import yaml

from .cluster import (TemplateParams, ClusterDescriptor, ClusterNetwork,
                      Endpoint, NetworkRanges, MachineDescriptor,
                      MachineVersions)
from .util.logger import Logger
from .util.net import is_ip, is_port

LOGGER = Logger(__name__)


def _ranges(blocks):
    if blocks is None:
        return None
    if isinstance(blocks, str):
        blocks = [blocks]
    return NetworkRanges(cidr_blocks=tuple(blocks))


def _mapping(config, section):
    if config is not None and not isinstance(config, dict):
        raise ValueError(f"{section} must be a mapping, got {config!r}")
    return config


def _endpoint(config):
    if not isinstance(config, dict):
        raise ValueError(
            f"api-endpoints entry must be a mapping, got {config!r}")
    host, port = config.get('host'), config.get('port')
    if not is_ip(str(host)):
        LOGGER.warning("API endpoint host %s is not an IP address", host)
    if not is_port(port):
        LOGGER.warning("API endpoint port %s is not a valid port", port)
    return Endpoint(host=host, port=port)


def cluster_from_dict(config):
    """Create a ClusterDescriptor from the ``cluster`` section"""
    _mapping(config, "cluster")
    if config is None:
        return None

    network = _mapping(config.get('network'), "network")
    if network is not None:
        network = ClusterNetwork(
            services=_ranges(network.get('services')),
            pods=_ranges(network.get('pods')),
            service_domain=network.get('service-domain'))

    return ClusterDescriptor(
        name=config.get('name'),
        api_endpoints=tuple(_endpoint(e) for e in
                            config.get('api-endpoints') or []),
        network=network)


def machine_from_dict(config):
    """Create a MachineDescriptor from the ``machine`` section"""
    _mapping(config, "machine")
    if config is None:
        return None

    versions = MachineVersions(
        kubelet=_version(config.get('kubelet-version')),
        control_plane=_version(config.get('control-plane-version')))
    return MachineDescriptor(name=config.get('name'), versions=versions)


def _version(value):
    # YAML reads 1.10 as a float
    return None if value is None else str(value)


def params_from_dict(config):
    """Create TemplateParams from a parsed configuration file"""
    return TemplateParams(
        token=config.get('token', ""),
        cluster=cluster_from_dict(config.get('cluster')),
        machine=machine_from_dict(config.get('machine')),
        images=config.get('images') or (),
        preloaded=bool(config.get('preloaded', False)))


def load_config(path):
    """
    Read the YAML file at ``path`` and return TemplateParams.

    Raises:
        ValueError if the file or one of its sections isn't a mapping
    """
    with open(path, 'r') as stream:
        config = yaml.safe_load(stream)

    if not isinstance(config, dict):
        raise ValueError(f"{path} is not a valid configuration file")

    LOGGER.debug("Loaded configuration %s", path)
    return params_from_dict(config)
