"""
tests for kubestrap.config
"""
import pytest

from kubestrap.cluster import Endpoint, NetworkRanges
from kubestrap.config import load_config, params_from_dict

from .testdata import CONFIG_FILE, PARAMS


def test_load_config():
    assert load_config(CONFIG_FILE) == PARAMS


def test_load_config_not_a_mapping(tmp_path):
    path = tmp_path / "broken.yml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ValueError):
        load_config(str(path))


def test_missing_sections():
    params = params_from_dict({"machine": {"kubelet-version": 1.10}})

    assert params.cluster is None
    assert params.token == ""
    assert params.images == ()
    assert params.preloaded is False
    assert params.machine.name is None
    # YAML reads unquoted versions as floats
    assert params.machine.versions.kubelet == "1.1"
    assert params.machine.versions.control_plane is None


def test_single_cidr_block():
    params = params_from_dict({
        "cluster": {"network": {"services": "10.96.0.0/12"}}})

    assert params.cluster.network.services == NetworkRanges(("10.96.0.0/12",))
    assert params.cluster.network.pods is None
    assert params.cluster.api_endpoints == ()


def test_endpoint_is_only_warned_about():
    params = params_from_dict({
        "cluster": {"api-endpoints": [{"host": "api.example.com",
                                       "port": "https"}]}})

    assert params.cluster.api_endpoints == (
        Endpoint(host="api.example.com", port="https"),)


@pytest.mark.parametrize("config", [
    {"cluster": {"api-endpoints": ["10.0.0.1:443"]}},
    {"cluster": ["a", "b"]},
    {"cluster": {"network": "10.96.0.0/12"}},
    {"machine": "node-1"},
])
def test_section_not_a_mapping(config):
    with pytest.raises(ValueError):
        params_from_dict(config)
